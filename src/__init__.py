"""
Budget Tracker - Source Package

A personal monthly/annual budget tracker: income and expense entries per
month, stored locally, with share links and JSON export/import.

DESIGN PRINCIPLES:
1. One owned budget value, changed only through pure operations
2. Incoming data is validated completely or not applied at all
3. Merge never loses entries; replace always asks first
4. Optional services degrade, they never crash the app
"""

__version__ = "1.0.0"
__author__ = "Budget Tracker Team"
