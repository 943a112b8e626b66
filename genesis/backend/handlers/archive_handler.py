"""
ArchiveHandler module for unpacking downloaded engine builds.
"""

import logging
import os
import zipfile
from pathlib import Path

from genesis.backend.models.errors import ExtractionError

logger = logging.getLogger(__name__)

ARCHIVE_FILE_NAME = "funkin.zip"


class ArchiveHandler:

    @staticmethod
    def extract(archive_path: Path, dest_dir: Path, remove_archive: bool = True) -> Path:
        """
        Extract every entry of a zip archive into dest_dir, overwriting
        existing files. The archive is deleted only after a successful
        extraction; on failure it is kept and the partial tree is left as is.

        Raises:
            ExtractionError: corrupt archive, unsafe entry or I/O failure
        """
        archive_path = Path(archive_path)
        dest_dir = Path(dest_dir)
        logger.info(f"Extracting {archive_path} into {dest_dir}")

        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            root = dest_dir.resolve()
            with zipfile.ZipFile(archive_path, 'r') as zf:
                members = zf.infolist()
                for member in members:
                    target = (root / member.filename).resolve()
                    if target != root and root not in target.parents:
                        raise ExtractionError(f"Unsafe path in archive: {member.filename}")
                for member in members:
                    extracted = zf.extract(member, root)
                    ArchiveHandler._apply_unix_mode(member, extracted)
            logger.info(f"Extracted {len(members)} entries")
        except ExtractionError:
            logger.error(f"Extraction of {archive_path} aborted (archive kept)")
            raise
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError, RuntimeError, ValueError) as e:
            logger.error(f"Extraction of {archive_path} failed (archive kept): {e}")
            raise ExtractionError(str(e)) from e

        if remove_archive:
            try:
                archive_path.unlink()
            except OSError as e:
                logger.warning(f"Could not remove archive {archive_path}: {e}")
        return dest_dir

    @staticmethod
    def _apply_unix_mode(member: zipfile.ZipInfo, extracted_path: str) -> None:
        """Re-apply permission bits stored by Unix zip tools (keeps binaries executable)."""
        mode = (member.external_attr >> 16) & 0o777
        if not mode or member.is_dir() or os.name == 'nt':
            return
        try:
            os.chmod(extracted_path, mode)
        except OSError as e:
            logger.debug(f"Could not chmod {extracted_path}: {e}")
