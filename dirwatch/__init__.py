"""
dirwatch: watch a directory and report every change as a timestamped event.

Provides both a CLI and a library API. Events are published to live
consumers through an outbound stream and kept in an in-memory log that can
be queried at any time.
"""

__version__ = "0.1.0"
