"""
Profile Accounts - Source Package

Stores the profile attributes of already-authenticated users together
with their privacy scope and verification status.

DESIGN PRINCIPLES:
1. The whole property set is the unit of persistence
2. User input is validated strictly, stored data is sanitized leniently
3. Trust never survives a value change
4. Storage, job queue and event bus are swappable
"""

__version__ = "1.0.0"
__author__ = "Profile Accounts Team"
