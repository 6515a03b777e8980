"""Peer-to-peer clothing rental API."""

__version__ = "0.1.0"
