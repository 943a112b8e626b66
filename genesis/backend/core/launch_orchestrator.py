"""
Install/Launch Orchestrator

Drives one "play" request through the pipeline:

    PROBING -> installed:     LINKING -> LAUNCHING -> DONE
            -> not installed: DOWNLOADING -> EXTRACTING -> LINKING
                              -> (LAUNCHING if auto_launch) -> DONE

Any terminal failure ends in ERROR and is reported as a single
``download-error`` signal. At most one pipeline runs per (engine, version).
"""

import logging
import threading
import traceback
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

from genesis.backend.handlers.archive_handler import ARCHIVE_FILE_NAME, ArchiveHandler
from genesis.backend.handlers.config_handler import ConfigHandler
from genesis.backend.handlers.download_handler import DownloadHandler
from genesis.backend.models.configuration import LauncherPaths, SystemInfo
from genesis.backend.models.errors import (
    ExtractionError,
    LaunchError,
    LaunchInProgressError,
    LauncherError,
    ModLinkError,
    NoDownloadLinkError,
    TransferError,
)
from genesis.backend.models.launch import (
    HostWindow,
    LaunchRequest,
    LaunchResult,
    LaunchState,
    Platform,
    Signals,
)
from genesis.backend.services.install_state_service import is_installed
from genesis.backend.services.mod_library_service import ModLibraryService
from genesis.backend.services.process_launcher_service import ProcessLauncherService
from genesis.shared.progress_models import TransferState

logger = logging.getLogger(__name__)

Emitter = Callable[[str, Dict[str, Any]], None]

# Statuses on the platform download that make the Windows build worth trying
FALLBACK_STATUS_CODES = (404, 500)


def select_download_urls(links: Dict[str, str], platform: Platform) -> Tuple[Optional[str], Optional[str]]:
    """
    Returns:
        (primary, fallback). The primary is the platform's own link; the
        fallback is the Windows link, only on Linux and only when it differs
        from the primary.
    """
    links = links or {}
    if platform == Platform.WINDOWS:
        primary = links.get('windows') or None
    elif platform == Platform.LINUX:
        primary = links.get('linux') or None
    else:
        primary = None

    fallback = None
    windows_link = links.get('windows') or None
    if platform == Platform.LINUX and windows_link and windows_link != primary:
        fallback = windows_link
    return primary, fallback


def is_fallback_error(error: TransferError) -> bool:
    if error.status_code is not None:
        return error.status_code in FALLBACK_STATUS_CODES
    message = str(error)
    return any(str(code) in message for code in FALLBACK_STATUS_CODES)


class LaunchOrchestrator:
    """Top-level install/launch state machine. Holds no UI state."""

    def __init__(self, system_info: SystemInfo, paths: LauncherPaths,
                 emit: Optional[Emitter] = None,
                 host_window: Optional[HostWindow] = None,
                 config_handler: Optional[ConfigHandler] = None,
                 download_handler: Optional[DownloadHandler] = None,
                 process_launcher: Optional[ProcessLauncherService] = None,
                 mod_service: Optional[ModLibraryService] = None):
        self.system_info = system_info
        self.paths = paths
        self._emit = emit or (lambda name, payload: None)
        self.download_handler = download_handler or DownloadHandler()
        self.process_launcher = process_launcher or ProcessLauncherService(system_info, host_window)
        self.mod_service = mod_service or ModLibraryService(paths.mods_root, config_handler)

        self._busy = set()
        self._busy_lock = threading.Lock()
        self._states: Dict[Tuple[str, str], LaunchState] = {}

    # Public commands

    def launch(self, request: LaunchRequest) -> Optional[threading.Thread]:
        """
        ``launch-game``: run the pipeline in a background thread.

        Returns the worker thread, or None if the same (engine, version) is
        already being processed.
        """
        if not self._acquire(request):
            return None

        def launch_worker():
            try:
                self._run_pipeline(request)
            finally:
                self._release(request)

        thread = threading.Thread(target=launch_worker, daemon=True,
                                  name=f"launch-{request.engine_id}-{request.version}")
        thread.start()
        return thread

    def run(self, request: LaunchRequest) -> LaunchResult:
        """Blocking variant of launch()."""
        if not self._acquire(request):
            return LaunchResult(state=LaunchState.ERROR, error=self._busy_message(request))
        try:
            return self._run_pipeline(request)
        finally:
            self._release(request)

    def get_state(self, engine_id: str, version: str) -> LaunchState:
        return self._states.get((engine_id, version), LaunchState.IDLE)

    def is_busy(self, engine_id: str, version: str) -> bool:
        with self._busy_lock:
            return (engine_id, version) in self._busy

    # Re-entrancy guard

    def _acquire(self, request: LaunchRequest) -> bool:
        with self._busy_lock:
            if request.key in self._busy:
                busy = True
            else:
                self._busy.add(request.key)
                busy = False
        if busy:
            error = LaunchInProgressError(self._busy_message(request))
            logger.warning(str(error))
            self._emit_error(str(error))
            return False
        return True

    def _release(self, request: LaunchRequest) -> None:
        with self._busy_lock:
            self._busy.discard(request.key)

    @staticmethod
    def _busy_message(request: LaunchRequest) -> str:
        return f"{request.display_name} is already being installed or running"

    # Pipeline

    def _transition(self, request: LaunchRequest, state: LaunchState) -> None:
        logger.debug(f"{request.engine_id}/{request.version}: {state.value}")
        self._states[request.key] = state

    def _emit_signal(self, name: str, payload: Dict[str, Any]) -> None:
        try:
            self._emit(name, payload)
        except Exception as e:
            logger.error(f"Signal handler for {name} failed: {e}")

    def _emit_error(self, message: str, fatal: bool = True) -> None:
        payload = {'error': message}
        if not fatal:
            payload['fatal'] = False
        self._emit_signal(Signals.DOWNLOAD_ERROR, payload)

    def _run_pipeline(self, request: LaunchRequest) -> LaunchResult:
        install_dir = None
        try:
            install_dir = self.paths.install_dir(request.engine_id, request.version)
            self._transition(request, LaunchState.PROBING)
            if is_installed(install_dir, request.exe_name, self.system_info.platform):
                logger.info(f"{request.display_name} already installed at {install_dir}")
                return self._run_installed(request, install_dir)
            return self._run_install(request, install_dir)
        except LauncherError as e:
            self._transition(request, LaunchState.ERROR)
            logger.error(f"Launch of {request.display_name} failed: {e}")
            self._emit_error(str(e))
            return LaunchResult(state=LaunchState.ERROR, error=str(e),
                                install_dir=str(install_dir) if install_dir else None)
        except Exception as e:
            self._transition(request, LaunchState.ERROR)
            logger.error(f"Unexpected error launching {request.display_name}: {e}")
            logger.debug(traceback.format_exc())
            self._emit_error(f"Unexpected error: {e}")
            return LaunchResult(state=LaunchState.ERROR, error=str(e),
                                install_dir=str(install_dir) if install_dir else None)

    def _run_installed(self, request: LaunchRequest, install_dir: Path) -> LaunchResult:
        self._link_mods(request, install_dir)
        self._emit_signal(Signals.GAME_READY, {'name': request.display_name, 'path': str(install_dir)})
        exit_code = self._launch_game(request, install_dir)
        self._transition(request, LaunchState.DONE)
        return LaunchResult(state=LaunchState.DONE, install_dir=str(install_dir),
                            launched=True, exit_code=exit_code)

    def _run_install(self, request: LaunchRequest, install_dir: Path) -> LaunchResult:
        try:
            install_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExtractionError(f"Could not create install folder: {e}") from e

        archive_path = install_dir / ARCHIVE_FILE_NAME
        self._download(request, archive_path)

        self._transition(request, LaunchState.EXTRACTING)
        self._emit_signal(Signals.UNZIP_START, {})
        try:
            ArchiveHandler.extract(archive_path, install_dir)
        except ExtractionError as e:
            raise ExtractionError(f"Error extracting: {e}") from e

        self._link_mods(request, install_dir)
        self._emit_signal(Signals.DOWNLOAD_COMPLETE, {'name': request.display_name, 'path': str(install_dir)})

        exit_code = None
        if request.auto_launch:
            exit_code = self._launch_game(request, install_dir)
        self._transition(request, LaunchState.DONE)
        return LaunchResult(state=LaunchState.DONE, install_dir=str(install_dir),
                            launched=request.auto_launch, exit_code=exit_code)

    def _download(self, request: LaunchRequest, archive_path: Path) -> None:
        platform = self.system_info.platform
        primary, fallback = select_download_urls(request.download_links, platform)
        self._transition(request, LaunchState.DOWNLOADING)

        if primary:
            try:
                self._fetch(primary, archive_path)
                return
            except TransferError as e:
                if not (platform == Platform.LINUX and fallback and is_fallback_error(e)):
                    raise
                logger.info(f"Linux download failed ({e}), trying the Windows build")
                self._emit_signal(Signals.DOWNLOAD_PROGRESS, {
                    'percent': 0, 'receivedBytes': 0, 'totalBytes': 0,
                    'url': 'Linux 404, trying Windows...',
                })
        elif not fallback:
            raise NoDownloadLinkError(f"No download link for {platform.value}")
        else:
            logger.info("No Linux download link, using the Windows build")

        try:
            self._fetch(fallback, archive_path)
        except TransferError as e:
            raise TransferError(f"Windows fallback failed: {e}", status_code=e.status_code) from e

    def _fetch(self, url: str, archive_path: Path) -> None:
        def on_progress(state: TransferState):
            self._emit_signal(Signals.DOWNLOAD_PROGRESS, state.to_signal_payload(url))

        self.download_handler.download(url, archive_path, on_progress)

    def _link_mods(self, request: LaunchRequest, install_dir: Path) -> None:
        """Link visible mods; failure is a warning and never blocks the launch."""
        self._transition(request, LaunchState.LINKING)
        try:
            self.mod_service.link_into(install_dir)
        except (ModLinkError, OSError) as e:
            logger.warning(f"Continuing without mods: {e}")
            self._emit_error(f"Error linking mods: {e}", fatal=False)

    def _launch_game(self, request: LaunchRequest, install_dir: Path) -> int:
        self._transition(request, LaunchState.LAUNCHING)
        try:
            return self.process_launcher.launch(install_dir, request.exe_name)
        except LaunchError:
            raise
        except OSError as e:
            raise LaunchError(f"Error starting game: {e}") from e
