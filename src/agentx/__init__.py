"""AgentX - install skills, commands, and plugins for AI coding agents."""

__version__ = "0.4.0"
