"""libmagic-backed MIME type detection."""

import logging
import os
from typing import Optional

import magic

from validation.sniffer import MimeSniffer

DEFAULT_HEADER_SIZE = 2048

# libmagic answers that say nothing about the content
INCONCLUSIVE_MIME_TYPES = {"", "application/octet-stream", "inode/x-empty"}


class MimeTypeDetector(MimeSniffer):
    """Detects MIME types using python-magic with fallback to extension-based detection."""

    def __init__(self, magic_file: Optional[str] = None, header_size: int = DEFAULT_HEADER_SIZE):
        self.magic_file = magic_file
        self.header_size = header_size
        self._magic: Optional[magic.Magic] = None
        self.extension_mime_map = {
            ".bmp": "image/bmp",
            ".gif": "image/gif",
            ".ico": "image/x-icon",
            ".jpe": "image/jpeg",
            ".jpg": "image/jpeg",
            ".jpeg": "image/jpeg",
            ".jp2": "image/jp2",
            ".png": "image/png",
            ".psd": "image/vnd.adobe.photoshop",
            ".svg": "image/svg+xml",
            ".tif": "image/tiff",
            ".tiff": "image/tiff",
            ".webp": "image/webp",
            ".pdf": "application/pdf",
            ".txt": "text/plain",
            ".html": "text/html",
            ".json": "application/json",
            ".zip": "application/zip",
        }

    def sniff(self, path: str, filename: Optional[str] = None) -> Optional[str]:
        """
        Detect MIME type of a file from its header bytes.

        Args:
            path: Path of the file on disk
            filename: Original name of the file, used for the extension fallback

        Returns:
            Optional[str]: Detected MIME type, or None if nothing matched

        Raises:
            OSError: If the file cannot be read
        """
        with open(path, "rb") as f:
            header = f.read(self.header_size)

        mime_type = self.detect_mime_type(header)
        if mime_type:
            return mime_type

        for name in (filename, path):
            mime_type = self._get_mime_from_extension(name or "")
            if mime_type:
                logging.warning(f"Falling back to extension-based MIME type {mime_type} for {name}")
                return mime_type

        return None

    def detect_mime_type(self, content: bytes) -> Optional[str]:
        """
        Detect MIME type of file content using libmagic.

        Args:
            content: Leading bytes of the file

        Returns:
            Optional[str]: Detected MIME type, or None if libmagic was inconclusive
        """
        try:
            mime_type = self._get_magic().from_buffer(content)
        except magic.MagicException as e:
            logging.warning(f"Magic MIME detection failed: {e}, falling back to extension")
            return None

        if mime_type in INCONCLUSIVE_MIME_TYPES:
            logging.info(f"Magic MIME detection inconclusive: {mime_type!r}")
            return None

        logging.info(f"Detected MIME type using magic: {mime_type}")
        return mime_type

    def _get_magic(self) -> magic.Magic:
        """Create the libmagic handle on first use."""
        if self._magic is None:
            self._magic = magic.Magic(mime=True, magic_file=self.magic_file)
        return self._magic

    def _get_mime_from_extension(self, filename: str) -> Optional[str]:
        """
        Get MIME type from file extension.

        Args:
            filename: Name of the file

        Returns:
            Optional[str]: MIME type based on extension, None for unknown extensions
        """
        if not filename:
            return None

        ext = os.path.splitext(filename.lower())[1]
        return self.extension_mime_map.get(ext)
