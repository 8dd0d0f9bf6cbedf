"""
Test configuration and fixtures for the MIME type validators.

This module provides common fixtures and configuration for all tests.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict

import pytest

# Add the parent directory to the path so we can import the packages
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tests.utils.fixtures import GIF_CONTENT, JPEG_CONTENT, FakeMimeSniffer, make_upload


@pytest.fixture
def jpeg_file(tmp_path: Path) -> Path:
    """
    Fixture providing a real JPEG file on disk.

    Returns:
        Path: Path of the written picture
    """
    path = tmp_path / "picture.jpg"
    path.write_bytes(JPEG_CONTENT)
    return path


@pytest.fixture
def gif_file(tmp_path: Path) -> Path:
    """Fixture providing a real GIF file on disk."""
    path = tmp_path / "picture.gif"
    path.write_bytes(GIF_CONTENT)
    return path


@pytest.fixture
def jpeg_upload(jpeg_file: Path) -> Dict[str, Any]:
    """
    Fixture providing the upload record of the JPEG file.

    Returns:
        dict: Upload record declaring image/jpeg
    """
    return make_upload(str(jpeg_file))


@pytest.fixture
def jpeg_sniffer() -> FakeMimeSniffer:
    """Fixture providing a sniffer that recognizes every file as a JPEG."""
    return FakeMimeSniffer("image/jpeg")


@pytest.fixture
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove validator settings from the environment for config tests."""
    for name in ("IMAGE_MIME_TYPES", "ENABLE_HEADER_CHECK", "MAGIC_FILE", "MAGIC_HEADER_SIZE", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
