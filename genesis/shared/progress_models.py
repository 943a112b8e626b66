"""
Progress Data Models

Transfer progress state shared by the download handler, the orchestrator
and the frontends.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


def format_bytes(bytes_val: float) -> str:
    """Format bytes to human-readable format."""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if bytes_val < 1024.0:
            return f"{bytes_val:.1f}{unit}"
        bytes_val /= 1024.0
    return f"{bytes_val:.1f}PB"


@dataclass
class TransferState:
    """Progress of a single download. Lives from start until completion or error."""
    url: str
    destination_path: Path
    received_bytes: int = 0
    total_bytes: Optional[int] = None  # None when the server omits Content-Length

    @property
    def percent(self) -> float:
        """0-100, or 0 while the total is unknown."""
        if not self.total_bytes or self.total_bytes <= 0:
            return 0.0
        return min(100.0, self.received_bytes / self.total_bytes * 100)

    def to_signal_payload(self, source_label: str) -> dict:
        """Payload of the ``download-progress`` signal."""
        return {
            'percent': self.percent,
            'receivedBytes': self.received_bytes,
            'totalBytes': self.total_bytes or 0,
            'url': source_label,
        }
