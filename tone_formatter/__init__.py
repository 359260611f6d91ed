"""Tone Formatter: rewrite text in a formal or casual tone through an LLM relay."""

__version__ = "1.0.0"
