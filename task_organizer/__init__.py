"""
Smart Task Organizer: a single-user task tracker served over HTTP.
"""

__version__ = "0.1.0"
