"""
netquiz - adaptive practice engine for networking certification study.

Tracks per-question mastery, selects questions for seven practice modes,
keeps a daily study streak and meters usage by subscription tier.
"""

__version__ = "1.0.0"
