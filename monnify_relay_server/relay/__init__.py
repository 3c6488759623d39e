"""
Monnify Relay Server

A small FastAPI service relaying authentication and NIN lookups to the
Monnify payment API.
"""

__version__ = "1.0.0"
