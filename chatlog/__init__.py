"""Data models for chat history records and their plain-text rendering."""

__version__ = "0.1.0"