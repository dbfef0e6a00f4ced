"""Hybrid lexical + semantic ranking of folders and tags for notes."""

__version__ = "0.3.0"
