"""
Entry point for running agentmem as a module: python -m agentmem
"""

from agentmem.cli.commands import app

if __name__ == "__main__":
    app()
