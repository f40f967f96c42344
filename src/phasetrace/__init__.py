"""Phasetrace - compile-time interval traces for generic trace viewers."""

__version__ = "0.1.0"
