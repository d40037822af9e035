"""
Anitrack - personal watchlist tracker with portable snapshots
"""

__version__ = "0.4.0"
