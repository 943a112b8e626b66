import os
from pathlib import Path

import pytest

from conftest import RecordingHostWindow
from genesis.backend.models.configuration import SystemInfo
from genesis.backend.models.errors import LaunchError
from genesis.backend.models.launch import Platform
from genesis.backend.services.process_launcher_service import ProcessLauncherService

HIDE_THEN_RESTORE = ['get_bounds', 'hide', ('restore', RecordingHostWindow.BOUNDS)]


def _exe(install_dir, name):
    install_dir.mkdir(parents=True, exist_ok=True)
    path = install_dir / name
    path.write_bytes(b"bin")
    return path


@pytest.mark.skipif(os.name == 'nt', reason="Unix permission bits")
def test_native_linux_binary_runs_in_install_dir(tmp_path, linux_info, fake_popen, host_window, monkeypatch):
    monkeypatch.setenv("APPIMAGE", "/tmp/launcher.AppImage")
    exe = _exe(tmp_path, "Funkin")
    exe.chmod(0o644)

    exit_code = ProcessLauncherService(linux_info, host_window).launch(tmp_path, "Funkin")

    assert exit_code == 0
    [proc] = fake_popen.calls
    assert proc.cmd == [str(exe)]
    assert proc.kwargs['cwd'] == str(tmp_path)
    assert 'APPIMAGE' not in proc.kwargs['env']
    assert os.access(exe, os.X_OK)
    assert host_window.events == HIDE_THEN_RESTORE


def test_linux_falls_back_to_windows_build_through_wine(tmp_path, linux_info, fake_popen, host_window):
    exe = _exe(tmp_path, "CodenameEngine.exe")

    ProcessLauncherService(linux_info, host_window).launch(tmp_path, "CodenameEngine")

    assert fake_popen.calls[0].cmd == ["/usr/bin/wine", str(exe)]


def test_windows_runs_exe_directly(tmp_path, windows_info, fake_popen):
    _exe(tmp_path, "Funkin")
    exe = _exe(tmp_path, "Funkin.exe")

    ProcessLauncherService(windows_info).launch(tmp_path, "Funkin")

    assert fake_popen.calls[0].cmd == [str(exe)]


def test_missing_executable_is_not_found(tmp_path, linux_info, fake_popen, host_window):
    tmp_path.joinpath("readme.txt").write_text("no game here")

    with pytest.raises(LaunchError) as excinfo:
        ProcessLauncherService(linux_info, host_window).launch(tmp_path, "Funkin")

    assert excinfo.value.hint == LaunchError.NOT_FOUND
    assert fake_popen.calls == []
    assert host_window.events == []


def test_other_platform_never_launches(tmp_path, fake_popen):
    _exe(tmp_path, "Funkin")
    _exe(tmp_path, "Funkin.exe")

    with pytest.raises(LaunchError):
        ProcessLauncherService(SystemInfo(platform=Platform.OTHER)).launch(tmp_path, "Funkin")


def test_wine_spawn_failure_mentions_compat_layer(tmp_path, host_window, monkeypatch):
    from genesis.backend.services import process_launcher_service

    def missing_wine(*args, **kwargs):
        raise FileNotFoundError("wine")

    monkeypatch.setattr(process_launcher_service.subprocess, "Popen", missing_wine)
    _exe(tmp_path, "Funkin.exe")
    info = SystemInfo(platform=Platform.LINUX, compat_layer_path=Path("/missing/wine"))

    with pytest.raises(LaunchError) as excinfo:
        ProcessLauncherService(info, host_window).launch(tmp_path, "Funkin")

    assert excinfo.value.hint == LaunchError.COMPAT_MISSING
    assert "is it installed?" in str(excinfo.value)
    assert host_window.events == HIDE_THEN_RESTORE


def test_native_spawn_failure_is_distinguishable(tmp_path, linux_info, host_window, monkeypatch):
    from genesis.backend.services import process_launcher_service

    def exec_format_error(*args, **kwargs):
        raise OSError(8, "Exec format error")

    monkeypatch.setattr(process_launcher_service.subprocess, "Popen", exec_format_error)
    _exe(tmp_path, "Funkin")

    with pytest.raises(LaunchError) as excinfo:
        ProcessLauncherService(linux_info, host_window).launch(tmp_path, "Funkin")

    assert excinfo.value.hint == LaunchError.SPAWN_FAILED
    assert "Wine" not in str(excinfo.value)
    assert host_window.events == HIDE_THEN_RESTORE


def test_nonzero_exit_code_is_returned_and_window_restored(tmp_path, linux_info, fake_popen, host_window):
    fake_popen.exit_code = 3
    _exe(tmp_path, "Funkin")

    assert ProcessLauncherService(linux_info, host_window).launch(tmp_path, "Funkin") == 3
    assert host_window.events == HIDE_THEN_RESTORE
