"""Sitch — keeps you updated on the feeds, channels, artists and titles you follow."""

__version__ = "0.3.0"
