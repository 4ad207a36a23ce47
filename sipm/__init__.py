"""
SIPM - Village Resident Registry

A small registry for village administrators to record residents,
review population figures and export filtered reports.

DESIGN PRINCIPLES:
1. The registry is the only writer of resident data
2. Fail early, fail visibly
3. No silent corrections
4. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "SIPM Parungkamal Team"
