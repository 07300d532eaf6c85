"""Configuration module for the IdentityNow connector."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]
