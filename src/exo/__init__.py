"""Exo - a personal knowledge management CLI."""

__version__ = "0.1.0"
