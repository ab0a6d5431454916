"""
Timestamp Splitter - split an audio file into named segments from text timestamps
"""

__version__ = "0.1.0"
