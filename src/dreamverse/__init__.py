"""Dreamverse - semantically clustered universe view of diary elements."""

__version__ = "0.1.0"
