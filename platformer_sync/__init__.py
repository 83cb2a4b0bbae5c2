"""
Platformer Sync: real-time shared-state server for a small multiplayer platformer.
"""

__version__ = "0.1.0"
