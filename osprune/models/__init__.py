"""Data models for resources, ignore lists, run configuration and reports."""
