"""
Team Finder event backbone
"""

__version__ = "1.0.0"
