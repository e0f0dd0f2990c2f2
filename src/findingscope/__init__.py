"""findingscope — search, filter, and summarise security findings."""

__version__ = "0.1.0"
