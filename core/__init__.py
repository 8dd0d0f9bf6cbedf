"""Core configuration and utilities."""

from .config import AppConfig, create_image_validator, get_config, setup_logging

__all__ = [
    "AppConfig",
    "create_image_validator",
    "get_config",
    "setup_logging",
]
