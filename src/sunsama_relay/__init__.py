"""Sunsama Relay: authenticated HTTP relay in front of a single shared Sunsama session."""

__version__ = "1.0.0"
