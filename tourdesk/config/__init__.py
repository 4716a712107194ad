# Configuration package
"""
Configuration package for the Tourdesk backend
Exports settings from settings.py for easy import
"""
from .settings import Settings, settings

__all__ = ["Settings", "settings"]
