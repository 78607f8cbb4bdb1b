"""Procedural urban block and building layout engine."""

__version__ = "0.3.0"
