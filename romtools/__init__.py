"""Charmap string preprocessing and include dependency scanning for ROM builds."""

__version__ = "0.1.0"