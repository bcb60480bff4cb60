"""Maintenance commands for the TreeHouse Books dashboard database."""

__version__ = "1.0.0"
