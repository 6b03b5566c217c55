"""Configuration module: exports Settings and load_settings."""

from genremap.config.loader import load_settings
from genremap.config.settings import Settings

__all__ = ["Settings", "load_settings"]
