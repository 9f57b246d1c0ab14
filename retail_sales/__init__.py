"""Retail sales management: sale aggregate, pricing policy and persistence."""

__version__ = "0.1.0"
