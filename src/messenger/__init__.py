"""Chat membership, lifecycle and relationship engines for a text messenger."""

__version__ = "0.1.0"
