"""
Byit - commission management for real-estate brokerage.

Resolves commission rates across the developer → project → category →
unit type hierarchy, freezes them onto deals, and drives commission
records through their approval lifecycle.
"""

__version__ = "1.0.0"
