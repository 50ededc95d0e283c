"""OpenStack connection helpers."""
