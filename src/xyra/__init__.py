"""Xyra - cross-chain lending action dispatch."""

__version__ = "0.1.0"
