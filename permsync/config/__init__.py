"""Configuration module for permsync."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]
