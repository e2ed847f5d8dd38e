"""Stenella: a combined RSS viewer with an editable source list."""

__version__ = "0.1.0"
