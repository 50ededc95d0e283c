"""Prune stale resources from an OpenStack tenant."""

__version__ = "0.1.0"
