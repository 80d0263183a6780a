"""Stokosor: household inventory of places, zones, nested containers and items."""

__version__ = "0.1.0"
