import os

import pytest

from conftest import make_zip
from genesis.backend.handlers.archive_handler import ARCHIVE_FILE_NAME, ArchiveHandler
from genesis.backend.models.errors import ExtractionError

FILES = {
    "Funkin": b"\x7fELF",
    "assets/data/song.json": b'{"bpm": 150}',
    "assets/music/inst.ogg": b"ogg",
}


def _tree(root):
    return {
        str(p.relative_to(root)): p.read_bytes()
        for p in sorted(root.rglob("*")) if p.is_file()
    }


def test_extract_writes_tree_and_removes_archive(tmp_path):
    archive = tmp_path / ARCHIVE_FILE_NAME
    archive.write_bytes(make_zip(FILES))

    ArchiveHandler.extract(archive, tmp_path)

    assert not archive.exists()
    assert (tmp_path / "assets" / "data" / "song.json").read_bytes() == b'{"bpm": 150}'


def test_extracting_twice_matches_single_extraction(tmp_path):
    once = tmp_path / "once"
    twice = tmp_path / "twice"
    data = make_zip(FILES)

    (once / ARCHIVE_FILE_NAME).parent.mkdir()
    (once / ARCHIVE_FILE_NAME).write_bytes(data)
    ArchiveHandler.extract(once / ARCHIVE_FILE_NAME, once)

    twice.mkdir()
    (twice / "assets" / "data").mkdir(parents=True)
    (twice / "assets" / "data" / "song.json").write_bytes(b"modified by user")
    for _ in range(2):
        (twice / ARCHIVE_FILE_NAME).write_bytes(data)
        ArchiveHandler.extract(twice / ARCHIVE_FILE_NAME, twice)

    assert _tree(once) == _tree(twice)


def test_corrupt_archive_is_kept(tmp_path):
    archive = tmp_path / ARCHIVE_FILE_NAME
    archive.write_bytes(b"this is not a zip file")

    with pytest.raises(ExtractionError):
        ArchiveHandler.extract(archive, tmp_path / "out")

    assert archive.exists()


def test_entries_escaping_destination_are_rejected(tmp_path):
    dest = tmp_path / "install"
    dest.mkdir()
    archive = dest / ARCHIVE_FILE_NAME
    archive.write_bytes(make_zip({"ok.txt": b"ok", "../evil.txt": b"evil"}))

    with pytest.raises(ExtractionError, match="Unsafe path"):
        ArchiveHandler.extract(archive, dest)

    assert not (tmp_path / "evil.txt").exists()
    assert not (dest / "ok.txt").exists()
    assert archive.exists()


@pytest.mark.skipif(os.name == 'nt', reason="Unix permission bits")
def test_unix_permissions_are_restored(tmp_path):
    archive = tmp_path / ARCHIVE_FILE_NAME
    archive.write_bytes(make_zip({"Funkin": b"bin", "readme.txt": b"hi"}, modes={"Funkin": 0o755}))

    ArchiveHandler.extract(archive, tmp_path)

    assert os.access(tmp_path / "Funkin", os.X_OK)
