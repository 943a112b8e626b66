"""
DownloadHandler module for streaming build archives to disk.

Redirects are followed by the handler itself (not by requests) so the
chain can be capped and every hop restarts from an empty destination file.
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Tuple
from urllib.parse import urljoin

import requests

from genesis import __version__
from genesis.backend.models.errors import TransferError
from genesis.shared.progress_models import TransferState

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[TransferState], None]

MAX_REDIRECTS = 10
CHUNK_SIZE = 64 * 1024
DEFAULT_TIMEOUT = (15, 60)  # (connect, read) seconds


class DownloadHandler:
    """Streams a URL to a file, following redirects and reporting progress."""

    def __init__(self, timeout: Tuple[float, float] = DEFAULT_TIMEOUT,
                 max_redirects: int = MAX_REDIRECTS):
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.headers = {'User-Agent': f'GenesisLauncher/{__version__}'}

    def download(self, url: str, destination_path: Path,
                 progress_callback: Optional[ProgressCallback] = None) -> Path:
        """
        Download url to destination_path.

        Args:
            url: Source URL
            destination_path: File to write (overwritten)
            progress_callback: Called with the TransferState after every chunk

        Returns:
            destination_path on success

        Raises:
            TransferError: on connection failure, non-200 status or redirect loop.
                The message embeds the status code ("Error: 404").
        """
        destination_path = Path(destination_path)
        current_url = url
        logger.info(f"Downloading {url} to {destination_path}")

        for _ in range(self.max_redirects + 1):
            next_url = self._fetch(current_url, destination_path, progress_callback)
            if next_url is None:
                logger.info(f"Download complete: {destination_path}")
                return destination_path
            logger.info(f"Redirected: {current_url} -> {next_url}")
            current_url = next_url

        logger.error(f"Too many redirects downloading {url}")
        raise TransferError(f"Error: too many redirects (>{self.max_redirects})")

    def _fetch(self, url: str, destination_path: Path,
               progress_callback: Optional[ProgressCallback]) -> Optional[str]:
        """
        One request. Returns the redirect target, or None once the body is
        fully written.
        """
        redirect_url = None
        try:
            destination_path.parent.mkdir(parents=True, exist_ok=True)
            with open(destination_path, 'wb') as f:
                with requests.get(url, stream=True, allow_redirects=False,
                                  timeout=self.timeout, headers=self.headers) as response:
                    status = response.status_code
                    location = response.headers.get('Location')

                    if 300 <= status < 400 and location:
                        redirect_url = urljoin(url, location)
                    elif status != 200:
                        raise TransferError(f"Error: {status}", status_code=status)
                    else:
                        state = TransferState(url=url, destination_path=destination_path,
                                              total_bytes=self._content_length(response))
                        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                            if not chunk:
                                continue
                            f.write(chunk)
                            state.received_bytes += len(chunk)
                            if progress_callback:
                                progress_callback(state)
        except TransferError as e:
            self._remove_partial(destination_path)
            logger.error(f"Download failed for {url}: {e}")
            raise
        except (requests.RequestException, OSError) as e:
            self._remove_partial(destination_path)
            logger.error(f"Download failed for {url}: {e}")
            raise TransferError(str(e)) from e

        if redirect_url:
            self._remove_partial(destination_path)
        return redirect_url

    @staticmethod
    def _content_length(response) -> Optional[int]:
        raw = response.headers.get('Content-Length')
        try:
            total = int(raw) if raw is not None else None
        except (TypeError, ValueError):
            return None
        return total if total and total > 0 else None

    @staticmethod
    def _remove_partial(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove partial download {path}: {e}")
