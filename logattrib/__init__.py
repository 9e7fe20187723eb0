"""
Character attribution engine for game client event logs.

Infers after the fact which owned character produced each event of a client
log and which level it held at any moment, and answers time-based queries over
the result.
"""

__version__ = "0.1.0"
__author__ = "Log Attribution Team"
