"""
Mood Calendar backend.
"""
