"""GENESIS peer-to-peer lending API."""

__version__ = "1.0.0"
