"""
Dancer Money Tracker - Source Package

Nightly earnings and bills tracking for hourly-wage workers.

DESIGN PRINCIPLES:
1. Records are immutable snapshots
2. Derived metrics are pure functions of those snapshots
3. Malformed input degrades to safe values, never to a crash
4. Every user action is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Dancer Money Tracker Team"
