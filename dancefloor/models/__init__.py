"""
Database models for Dancefloor
"""

from .models import *
