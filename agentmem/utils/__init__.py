"""Utility functions for agentmem."""
