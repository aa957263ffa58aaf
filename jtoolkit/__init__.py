"""jToolkit - portable command-line utilities for everyday system chores."""

__version__ = "1.0.0"
