"""makegraph: Makefile workspaces as project/task graphs."""

__version__ = "0.1.0"
