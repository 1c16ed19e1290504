"""Merged branch cleanup tool.

Features:
- Find branches already merged into master, locally and on the remote
- Delete the local and remote copies once the remote provably holds them
- Dry run by default, numbered confirmation prompts when deleting for real
- Prune stale remote-tracking refs and return to the starting branch
"""

__version__ = "0.1.0"
