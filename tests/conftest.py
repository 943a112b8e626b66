import io
import zipfile
from pathlib import Path

import pytest
import requests

from genesis.backend.handlers.config_handler import ConfigHandler
from genesis.backend.models.configuration import LauncherPaths, SystemInfo
from genesis.backend.models.launch import HostWindow, Platform
from genesis.backend.services import process_launcher_service


def make_zip(files, modes=None) -> bytes:
    """Zip bytes holding files ({name: bytes}); modes maps names to Unix permission bits."""
    modes = modes or {}
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, 'w', zipfile.ZIP_DEFLATED) as zf:
        for name, data in files.items():
            info = zipfile.ZipInfo(name)
            if name in modes:
                info.external_attr = (0o100000 | modes[name]) << 16
            zf.writestr(info, data)
    return buf.getvalue()


class FakeResponse:
    """Just enough of requests.Response for streaming downloads and catalog fetches."""

    def __init__(self, status_code=200, body=b"", headers=None, content_length=True):
        self.status_code = status_code
        self._body = body
        self.headers = dict(headers or {})
        if content_length and status_code == 200 and 'Content-Length' not in self.headers:
            self.headers['Content-Length'] = str(len(body))
        self.text = body.decode('utf-8', errors='replace')

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self._body), chunk_size):
            yield self._body[start:start + chunk_size]

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeHTTP:
    """Routes requests.get calls by URL and records every call."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, url, response):
        self.routes[url] = response

    def redirect(self, url, location, status=302):
        self.routes[url] = FakeResponse(status, headers={'Location': location})

    def get(self, url, **kwargs):
        self.calls.append(url)
        if url not in self.routes:
            raise requests.ConnectionError(f"No route to {url}")
        return self.routes[url]


class FakePopen:
    """Stands in for subprocess.Popen; instances land in FakePopen.calls."""

    calls = []
    exit_code = 0

    def __init__(self, cmd, **kwargs):
        self.cmd = cmd
        self.kwargs = kwargs
        FakePopen.calls.append(self)

    def wait(self):
        return self.exit_code


class RecordingHostWindow(HostWindow):
    BOUNDS = (10, 20, 1280, 720)

    def __init__(self):
        self.events = []

    def get_bounds(self):
        self.events.append('get_bounds')
        return self.BOUNDS

    def hide(self):
        self.events.append('hide')

    def restore(self, bounds):
        self.events.append(('restore', bounds))


class SignalRecorder:
    def __init__(self):
        self.signals = []

    def __call__(self, name, payload):
        self.signals.append((name, payload))

    def names(self):
        return [name for name, _ in self.signals]

    def payloads(self, name):
        return [payload for signal, payload in self.signals if signal == name]


@pytest.fixture(autouse=True)
def data_dir(tmp_path, monkeypatch):
    """Point the launcher data directory at a temp dir and start from a fresh settings store."""
    path = tmp_path / "data"
    monkeypatch.setenv("GENESIS_DATA_DIR", str(path))
    ConfigHandler.reset_instance()
    yield path
    ConfigHandler.reset_instance()


@pytest.fixture
def config_handler(data_dir):
    return ConfigHandler()


@pytest.fixture
def paths(tmp_path):
    return LauncherPaths(versions_root=tmp_path / "versions", mods_root=tmp_path / "mods")


@pytest.fixture
def linux_info():
    return SystemInfo(platform=Platform.LINUX, compat_layer_path=Path("/usr/bin/wine"))


@pytest.fixture
def windows_info():
    return SystemInfo(platform=Platform.WINDOWS)


@pytest.fixture
def http(monkeypatch):
    fake = FakeHTTP()
    monkeypatch.setattr(requests, "get", fake.get)
    return fake


@pytest.fixture
def fake_popen(monkeypatch):
    FakePopen.calls = []
    FakePopen.exit_code = 0
    monkeypatch.setattr(process_launcher_service.subprocess, "Popen", FakePopen)
    return FakePopen


@pytest.fixture
def host_window():
    return RecordingHostWindow()


@pytest.fixture
def signals():
    return SignalRecorder()


def write_mod(mods_root: Path, folder: str, files=None) -> Path:
    mod_dir = mods_root / folder
    mod_dir.mkdir(parents=True, exist_ok=True)
    for name, content in (files or {}).items():
        target = mod_dir / name
        if isinstance(content, bytes):
            target.write_bytes(content)
        else:
            target.write_text(content, encoding='utf-8')
    return mod_dir
