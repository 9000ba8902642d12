"""
ownersdb - file-ownership databases for port packages.
"""

__version__ = "1.0.0"
