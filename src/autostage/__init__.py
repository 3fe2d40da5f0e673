"""autostage — stage newly created files in a git working tree automatically."""

__version__ = "0.1.0"
