"""Core configuration and utility functions."""

import logging
import os
from typing import Any, Dict

from dotenv import load_dotenv

from validation.detection import DEFAULT_HEADER_SIZE, MimeTypeDetector
from validation.validators import IMAGE_MIME_TYPES, IsImageValidator, normalize_mime_types

# Load environment variables
load_dotenv()

# Image validation configuration constants
ENABLE_HEADER_CHECK = True
MAGIC_HEADER_SIZE = DEFAULT_HEADER_SIZE
LOG_LEVEL = "INFO"


class AppConfig:
    """Validator configuration settings read from the environment."""

    def __init__(self):
        self.image_mime_types = normalize_mime_types(os.getenv("IMAGE_MIME_TYPES", "")) or list(IMAGE_MIME_TYPES)
        self.enable_header_check = os.getenv("ENABLE_HEADER_CHECK", str(ENABLE_HEADER_CHECK)).lower() == "true"
        self.magic_file = os.getenv("MAGIC_FILE") or None
        self.magic_header_size = int(os.getenv("MAGIC_HEADER_SIZE", MAGIC_HEADER_SIZE))
        self.log_level = os.getenv("LOG_LEVEL", LOG_LEVEL)

        if self.magic_header_size <= 0:
            raise ValueError("MAGIC_HEADER_SIZE must be a positive number of bytes")

    def get_validator_options(self) -> Dict[str, Any]:
        """Get the option mapping accepted by the MIME validators."""
        return {
            "mime_type": self.image_mime_types,
            "enable_header_check": self.enable_header_check,
            "magic_file": self.magic_file,
        }


def create_image_validator(config: AppConfig) -> IsImageValidator:
    """Create image validator instance with configuration."""
    sniffer = MimeTypeDetector(magic_file=config.magic_file, header_size=config.magic_header_size)
    return IsImageValidator(config.get_validator_options(), sniffer=sniffer)


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def get_config() -> AppConfig:
    """Get the global application configuration instance."""
    return AppConfig()
