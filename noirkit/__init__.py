"""NoirKit portfolio builder backend."""

__version__ = "0.1.0"
