"""Dustpan: find files you have not opened in a while and sweep them away."""

__version__ = "0.1.0"
