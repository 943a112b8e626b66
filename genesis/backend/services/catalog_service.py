"""
Catalog service for loading the engine catalog (versions.yaml).

The remote copy is preferred; the bundled local file is the fallback and an
empty catalog is the last resort.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional

import requests
import yaml

from genesis.backend.models.catalog import Catalog

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_URL = "https://raw.githubusercontent.com/IamBritex/Funkin-Genesis-Launcher/main/versions.yaml"
LOCAL_CATALOG_FILE = "versions.yaml"


class CatalogService:
    """Service for fetching and parsing the engine catalog."""

    def __init__(self, remote_url: Optional[str] = DEFAULT_CATALOG_URL,
                 local_path: Optional[Path] = None, timeout: int = 15):
        self.remote_url = remote_url
        self.local_path = Path(local_path) if local_path else Path.cwd() / LOCAL_CATALOG_FILE
        self.timeout = timeout

    def load(self) -> Catalog:
        data = None
        if self.remote_url:
            data = self._load_remote()
        if data is None:
            data = self._load_local()
        if data is None:
            logger.error("No catalog could be loaded, continuing with an empty one")
            return Catalog()
        try:
            return Catalog.from_dict(data)
        except (ValueError, TypeError, AttributeError) as e:
            logger.error(f"Invalid catalog: {e}")
            return Catalog()

    def _load_remote(self) -> Optional[Dict[str, Any]]:
        try:
            logger.debug(f"Fetching catalog from {self.remote_url}")
            response = requests.get(self.remote_url, timeout=self.timeout)
            response.raise_for_status()
            data = self._parse(response.text)
            if data is not None:
                logger.info("Catalog loaded from remote")
            return data
        except requests.RequestException as e:
            logger.warning(f"Could not fetch remote catalog, using local copy: {e}")
            return None

    def _load_local(self) -> Optional[Dict[str, Any]]:
        try:
            data = self._parse(self.local_path.read_text(encoding='utf-8'))
            if data is not None:
                logger.info(f"Catalog loaded from {self.local_path}")
            return data
        except OSError as e:
            logger.error(f"Could not read local catalog {self.local_path}: {e}")
            return None

    @staticmethod
    def _parse(text: str) -> Optional[Dict[str, Any]]:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing catalog YAML: {e}")
            return None
        if not isinstance(data, dict):
            logger.error("Catalog YAML is not a mapping")
            return None
        return data
