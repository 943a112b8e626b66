#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Genesis CLI Frontend - Main Entry Point

Command-line interface for the launcher backend. Each command maps onto one
backend operation; pipeline signals are printed as they arrive.
"""

import argparse
import logging
import sys

from genesis import __version__ as genesis_version
from genesis.backend.core.launch_orchestrator import LaunchOrchestrator
from genesis.backend.handlers.config_handler import ConfigHandler
from genesis.backend.models.configuration import LauncherPaths
from genesis.backend.models.errors import InvalidInstallPathError
from genesis.backend.models.launch import LaunchRequest, Signals
from genesis.backend.services.catalog_service import CatalogService
from genesis.backend.services.install_state_service import InstallStateService
from genesis.backend.services.mod_library_service import ModLibraryService
from genesis.backend.services.platform_detection_service import PlatformDetectionService
from genesis.backend.services.version_service import VersionService
from genesis.shared.colors import (
    COLOR_ERROR,
    COLOR_INFO,
    COLOR_RESET,
    COLOR_SUCCESS,
    COLOR_WARNING,
)
from genesis.shared.progress_models import format_bytes

logger = logging.getLogger(__name__)


class GenesisCLI:
    """Main application class for the Genesis CLI frontend"""

    def __init__(self, paths=None, system_info=None):
        """
        Args:
            paths: LauncherPaths override (defaults to the per-user data dir)
            system_info: SystemInfo override (defaults to platform detection)
        """
        self.args = None
        self.paths = paths or LauncherPaths.default()
        self.system_info = system_info or PlatformDetectionService.get_instance().get_system_info()
        self.config_handler = ConfigHandler()
        self._last_percent = None

    def _configure_logging(self):
        """Route backend logs to the general log file at the requested level."""
        from genesis.backend.handlers.logging_handler import LoggingHandler

        if self.args.debug:
            level = logging.DEBUG
            print("Debug logging enabled")
        elif self.args.verbose:
            level = logging.INFO
            print("Verbose logging enabled")
        else:
            level = logging.WARNING

        logging_handler = LoggingHandler()
        logging_handler.setup_app_logger(level)
        logger.debug(f"Logging to {logging_handler.log_path()}")
        logger.debug(f"System info: {self.system_info.to_dict()}")

    def _parse_args(self, argv=None):
        parser = argparse.ArgumentParser(prog="genesis", description="Genesis Launcher CLI")
        parser.add_argument("-V", "--version", dest="show_version", action="store_true",
                            help="Show version and exit")
        parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging (implies verbose)")
        parser.add_argument("-v", "--verbose", action="store_true", help="Enable informational logging")

        subparsers = parser.add_subparsers(dest="command")

        launch = subparsers.add_parser("launch", help="Install (if needed) and run a build")
        launch.add_argument("engine")
        launch.add_argument("version")
        launch.add_argument("--exe", required=True, help="Executable name without extension")
        launch.add_argument("--windows-url", help="Windows build download URL")
        launch.add_argument("--linux-url", help="Linux build download URL")
        launch.add_argument("--name", help="Display name")
        launch.add_argument("--no-auto-launch", action="store_true",
                            help="Only install, do not start the game")

        play = subparsers.add_parser("play", help="Install (if needed) and run a catalog build")
        play.add_argument("engine")
        play.add_argument("version")
        play.add_argument("--catalog", help="Local versions.yaml (skips the remote catalog)")

        status = subparsers.add_parser("status", help="Check whether a build is installed")
        status.add_argument("engine")
        status.add_argument("version")
        status.add_argument("--exe", required=True, help="Executable name without extension")

        installed = subparsers.add_parser("installed", help="List installed builds")
        installed.add_argument("--catalog", help="Local versions.yaml (skips the remote catalog)")

        delete = subparsers.add_parser("delete", help="Delete an installed build")
        delete.add_argument("engine")
        delete.add_argument("version")

        open_cmd = subparsers.add_parser("open", help="Open an install folder")
        open_cmd.add_argument("engine")
        open_cmd.add_argument("version")

        mods = subparsers.add_parser("mods", help="Manage the mod library")
        mods_sub = mods.add_subparsers(dest="mods_command")
        mods_sub.add_parser("list", help="List installed mods")
        mods_add = mods_sub.add_parser("add", help="Copy a mod folder into the library")
        mods_add.add_argument("path")
        for name, help_text in (("remove", "Delete a mod"),
                                ("hide", "Hide a mod from all builds"),
                                ("show", "Show a hidden mod")):
            sub = mods_sub.add_parser(name, help=help_text)
            sub.add_argument("name")

        return parser, parser.parse_args(argv)

    def run(self, argv=None) -> int:
        parser, self.args = self._parse_args(argv)

        if self.args.show_version:
            print(f"Genesis Launcher {genesis_version}")
            return 0

        self._configure_logging()

        if not self.args.command:
            parser.print_help()
            return 1

        handlers = {
            'launch': self._cmd_launch,
            'play': self._cmd_play,
            'status': self._cmd_status,
            'installed': self._cmd_installed,
            'delete': self._cmd_delete,
            'open': self._cmd_open,
            'mods': self._cmd_mods,
        }
        try:
            return handlers[self.args.command](self.args)
        except KeyboardInterrupt:
            print(f"\n{COLOR_WARNING}Interrupted{COLOR_RESET}")
            return 130

    # Signal output

    def _print_signal(self, name, payload):
        if name == Signals.DOWNLOAD_PROGRESS:
            percent = int(payload.get('percent', 0))
            total = payload.get('totalBytes') or 0
            if total and percent == self._last_percent:
                return
            self._last_percent = percent
            received = format_bytes(payload.get('receivedBytes', 0))
            if total:
                status = f"{percent}% ({received}/{format_bytes(total)})"
            else:
                status = received
            print(f"\r{COLOR_INFO}Downloading... {status}{COLOR_RESET}", end="", flush=True)
        elif name == Signals.UNZIP_START:
            print(f"\n{COLOR_INFO}Extracting...{COLOR_RESET}")
        elif name == Signals.DOWNLOAD_COMPLETE:
            print(f"{COLOR_SUCCESS}Installed {payload.get('name')} in {payload.get('path')}{COLOR_RESET}")
        elif name == Signals.GAME_READY:
            print(f"{COLOR_SUCCESS}Starting {payload.get('name')}...{COLOR_RESET}")
        elif name == Signals.DELETE_SUCCESS:
            print(f"{COLOR_SUCCESS}Deleted {payload.get('engine')} {payload.get('version')}{COLOR_RESET}")
        elif name == Signals.DOWNLOAD_ERROR:
            color = COLOR_WARNING if payload.get('fatal') is False else COLOR_ERROR
            print(f"\n{color}{payload.get('error')}{COLOR_RESET}")

    # Commands

    def _load_catalog(self, catalog_path):
        if catalog_path:
            return CatalogService(remote_url=None, local_path=catalog_path).load()
        return CatalogService().load()

    def _run_launch(self, request: LaunchRequest) -> int:
        orchestrator = LaunchOrchestrator(
            self.system_info, self.paths, emit=self._print_signal, config_handler=self.config_handler
        )
        result = orchestrator.run(request)
        if not result.ok:
            return 1
        if result.exit_code:
            print(f"{COLOR_WARNING}Game exited with code {result.exit_code}{COLOR_RESET}")
        return 0

    def _cmd_launch(self, args) -> int:
        links = {}
        if args.windows_url:
            links['windows'] = args.windows_url
        if args.linux_url:
            links['linux'] = args.linux_url
        request = LaunchRequest(
            engine_id=args.engine,
            version=args.version,
            exe_name=args.exe,
            download_links=links,
            auto_launch=not args.no_auto_launch,
            name=args.name,
        )
        return self._run_launch(request)

    def _cmd_play(self, args) -> int:
        catalog = self._load_catalog(args.catalog)
        engine = catalog.get_engine(args.engine)
        if engine is None:
            print(f"{COLOR_ERROR}Unknown engine: {args.engine}{COLOR_RESET}")
            return 1
        entry = engine.get_version(args.version)
        if entry is None:
            print(f"{COLOR_ERROR}Unknown version {args.version} for {engine.display_name}{COLOR_RESET}")
            return 1
        request = LaunchRequest(
            engine_id=engine.id,
            version=entry.version,
            exe_name=engine.executable_name,
            download_links=dict(entry.download_urls),
            auto_launch=bool(self.config_handler.get('autoLaunch', True)),
            name=f"{engine.display_name} {entry.version}",
        )
        return self._run_launch(request)

    def _version_service(self) -> VersionService:
        install_state = InstallStateService(self.paths, self.system_info.platform)
        return VersionService(install_state, emit=self._print_signal)

    def _cmd_status(self, args) -> int:
        installed = self._version_service().check_install_status(args.engine, args.version, args.exe)
        if installed:
            print(f"{COLOR_SUCCESS}{args.engine} {args.version} is installed{COLOR_RESET}")
            return 0
        print(f"{COLOR_INFO}{args.engine} {args.version} is not installed{COLOR_RESET}")
        return 1

    def _cmd_installed(self, args) -> int:
        catalog = self._load_catalog(args.catalog)
        engines = self._version_service().get_installed_versions(catalog)
        if not engines:
            print(f"{COLOR_INFO}No builds installed{COLOR_RESET}")
            return 0
        for engine in engines:
            print(f"{COLOR_INFO}{engine['name']}{COLOR_RESET} ({engine['key']})")
            for version in engine['versions']:
                print(f"  {version}")
        return 0

    def _cmd_delete(self, args) -> int:
        try:
            install_dir = self.paths.install_dir(args.engine, args.version)
        except InvalidInstallPathError as e:
            print(f"{COLOR_ERROR}{e}{COLOR_RESET}")
            return 1
        if not install_dir.exists():
            print(f"{COLOR_ERROR}{args.engine} {args.version} is not installed{COLOR_RESET}")
            return 1
        deleted = []

        def on_signal(name, payload):
            if name == Signals.DELETE_SUCCESS:
                deleted.append(payload)
            self._print_signal(name, payload)

        install_state = InstallStateService(self.paths, self.system_info.platform)
        VersionService(install_state, emit=on_signal).delete_install(args.engine, args.version, wait=True)
        return 0 if deleted else 1

    def _cmd_open(self, args) -> int:
        return 0 if self._version_service().open_install_path(args.engine, args.version) else 1

    def _cmd_mods(self, args) -> int:
        service = ModLibraryService(self.paths.mods_root, self.config_handler)
        command = args.mods_command

        if command == 'list' or command is None:
            mods = service.get_installed()
            if not mods:
                print(f"{COLOR_INFO}No mods installed{COLOR_RESET}")
                return 0
            for mod in mods:
                hidden = "" if mod['visible'] else f" {COLOR_WARNING}[hidden]{COLOR_RESET}"
                version = f" v{mod['version']}" if mod.get('version') else ""
                print(f"{COLOR_INFO}{mod['title']}{COLOR_RESET}{version} "
                      f"({mod['engineKey']}, {mod['folderName']}){hidden}")
            return 0

        if command == 'add':
            result = service.validate_mod(args.path)
            if 'error' in result:
                print(f"{COLOR_ERROR}{result['error']}{COLOR_RESET}")
                return 1
            print(f"{COLOR_INFO}Installing {result['modData']['title']}...{COLOR_RESET}")
            result = service.install_mod(result['selectedPath'], result['folderName'])
        elif command == 'remove':
            result = service.delete_mod(args.name)
        elif command in ('hide', 'show'):
            result = service.set_visibility(args.name, command == 'show')
        else:
            print(f"{COLOR_ERROR}Unknown mods command: {command}{COLOR_RESET}")
            return 1

        if 'error' in result:
            print(f"{COLOR_ERROR}{result['error']}{COLOR_RESET}")
            return 1
        print(f"{COLOR_SUCCESS}Done{COLOR_RESET}")
        return 0


def main(argv=None) -> int:
    return GenesisCLI().run(argv)


if __name__ == "__main__":
    sys.exit(main())
