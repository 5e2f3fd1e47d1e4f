"""Hamqadam: pick a walking route on a map and find a companion along it."""

__version__ = "0.1.0"
