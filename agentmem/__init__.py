"""
agentmem - per-agent conversational memory with optional vector recall
"""

__version__ = "0.1.0"
