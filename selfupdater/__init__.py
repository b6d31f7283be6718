"""Checks a server for a newer version of an application, downloads and installs it."""

__version__ = "0.1.0"
__all__ = ["__version__"]