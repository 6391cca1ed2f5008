"""
MediPosts

Command line client for the JSONPlaceholder posts API with username
login, a local write-through cache and optimistic edits.
"""

__version__ = "0.1.0"
