"""
TrackSheet - time-tracker template editor with PDF annotation export.
"""

__version__ = "0.3.0"
