"""Constrained marketing copy generation."""

__version__ = "0.1.0"
