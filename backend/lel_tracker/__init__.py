"""
LEL Rider Tracker

Derived-state layer for following London-Edinburgh-London riders:
distance, speed, rank, DNF inference and latest checkpoint updates.
"""

__version__ = "0.1.0"
