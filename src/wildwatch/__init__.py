"""Wildwatch: resilient data access for the wildlife-protection dashboard."""

__version__ = "1.0.0"
