"""
Visitor Log.

Keeps a searchable store of building visitors in sync with a human-edited CSV
file, with ban/unban status and free-text notes.
"""

__version__ = "0.1.0"
