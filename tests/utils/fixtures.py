"""
Common test fixtures for the MIME type validators.

This module provides sample image content, upload records and a
fixed-answer MIME sniffer used in place of libmagic.
"""

import base64
from typing import Any, Dict, List, Optional, Tuple

from validation.sniffer import MimeSniffer

# Smallest JFIF header libmagic recognizes as image/jpeg
JPEG_CONTENT = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00" + b"\x00" * 64 + b"\xff\xd9"

# 1x1 transparent GIF
GIF_CONTENT = (
    b"GIF89a\x01\x00\x01\x00\x80\x00\x00\x00\x00\x00\xff\xff\xff!\xf9\x04\x01\x00\x00\x00\x00"
    b",\x00\x00\x00\x00\x01\x00\x01\x00\x00\x02\x02D\x01\x00;"
)

# Simple 1x1 pixel PNG image
PNG_CONTENT = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8/5+hHgAHggJ/PchI7wAAAABJRU5ErkJggg=="
)


class FakeMimeSniffer(MimeSniffer):
    """MIME sniffer that always answers with a fixed type and records its calls."""

    def __init__(self, mime_type: Optional[str] = None, error: Optional[Exception] = None):
        self.mime_type = mime_type
        self.error = error
        self.calls: List[Tuple[str, Optional[str]]] = []

    def sniff(self, path: str, filename: Optional[str] = None) -> Optional[str]:
        self.calls.append((path, filename))
        if self.error is not None:
            raise self.error
        return self.mime_type


def make_upload(path: str, name: str = "picture.jpg", mime_type: str = "image/jpeg", size: int = 200) -> Dict[str, Any]:
    """Build an upload record the way a form handler hands it over."""
    return {
        "tmp_name": path,
        "name": name,
        "size": size,
        "error": 0,
        "type": mime_type,
    }
