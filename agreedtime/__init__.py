"""
agreedtime - availability grid engine for finding a time that works for everyone.
"""

__version__ = "0.1.0"
