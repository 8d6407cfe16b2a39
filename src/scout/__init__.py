"""Scout, a local chat agent that reads files, searches code and remembers facts."""

__version__ = "0.1.0"
