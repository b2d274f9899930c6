"""
OneWay CLI

Commands:
- oneway version - Show version information
- oneway demo - Drive the reference To-Do feature with tracing enabled
"""

from oneway import __version__

__all__ = ["__version__"]
