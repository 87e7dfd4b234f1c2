"""Configuration module for the Clerk Admin API."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]
