"""Superchat extraction and reporting for fan-maintained stream archive pages."""

__version__ = "0.1.0"
