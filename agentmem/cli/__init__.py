"""Command-line interface for agentmem."""
