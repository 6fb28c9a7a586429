"""
Shared helpers: JSON file I/O and logging setup.
"""
