"""MIME sniffing capability consumed by the MIME validators."""

from abc import ABC, abstractmethod
from typing import Optional


class MimeSniffer(ABC):
    """Abstract base class for anything that can tell a file's MIME type."""

    @abstractmethod
    def sniff(self, path: str, filename: Optional[str] = None) -> Optional[str]:
        """
        Detect the MIME type of a file.

        Args:
            path: Path of the file on disk
            filename: Original name of the file, if known

        Returns:
            Optional[str]: Detected MIME type, or None if detection failed

        Raises:
            OSError: If the file cannot be read
        """
        pass
