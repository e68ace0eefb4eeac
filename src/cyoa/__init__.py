"""CYOA: choose-your-own-adventure story graph engine."""

__version__ = "0.3.0"
