"""
Shared helpers for text and money handling.
"""
