"""
calendaroverlay - Overlay busy calendar intervals onto event availability grids.
"""

__version__ = "0.1.0"
