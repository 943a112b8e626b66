import os

import pytest

from conftest import write_mod
from genesis.backend.handlers.mod_link_handler import ModLinkHandler
from genesis.backend.models.errors import ModLinkError

pytestmark = pytest.mark.skipif(os.name == 'nt', reason="uses POSIX symlinks")


@pytest.fixture
def library(tmp_path):
    mods_root = tmp_path / "mods"
    for name in ("alpha", "beta", "gamma"):
        write_mod(mods_root, name, {"data.txt": name})
    install_dir = tmp_path / "versions" / "funkin" / "0.5.3"
    install_dir.mkdir(parents=True)
    return mods_root, install_dir


def _linked(install_dir):
    return sorted(p.name for p in (install_dir / "mods").iterdir())


def test_links_visible_mods_and_skips_hidden(library):
    mods_root, install_dir = library

    linked, total = ModLinkHandler().materialize_links(install_dir, mods_root, {"beta": False, "gamma": True})

    assert (linked, total) == (2, 3)
    assert _linked(install_dir) == ["alpha", "gamma"]
    link = install_dir / "mods" / "alpha"
    assert link.is_symlink()
    assert os.path.realpath(link) == os.path.realpath(mods_root / "alpha")


def test_rebuild_replaces_stale_entries_without_touching_library(library):
    mods_root, install_dir = library
    handler = ModLinkHandler()
    handler.materialize_links(install_dir, mods_root, {})
    (install_dir / "mods" / "leftover").mkdir()

    handler.materialize_links(install_dir, mods_root, {"alpha": False})

    assert _linked(install_dir) == ["beta", "gamma"]
    assert (mods_root / "alpha" / "data.txt").read_text() == "alpha"


def test_existing_mods_symlink_is_replaced_not_followed(library, tmp_path):
    mods_root, install_dir = library
    (install_dir / "mods").symlink_to(mods_root, target_is_directory=True)

    ModLinkHandler().materialize_links(install_dir, mods_root, {})

    assert not (install_dir / "mods").is_symlink()
    assert _linked(install_dir) == ["alpha", "beta", "gamma"]
    assert sorted(p.name for p in mods_root.iterdir()) == ["alpha", "beta", "gamma"]


def test_missing_mods_root_is_created(tmp_path):
    install_dir = tmp_path / "install"
    install_dir.mkdir()
    mods_root = tmp_path / "no-mods-yet"

    assert ModLinkHandler().materialize_links(install_dir, mods_root, {}) == (0, 0)
    assert mods_root.is_dir()
    assert (install_dir / "mods").is_dir()


def test_files_in_mods_root_are_ignored(library):
    mods_root, install_dir = library
    (mods_root / "notes.txt").write_text("not a mod")

    assert ModLinkHandler().materialize_links(install_dir, mods_root, {}) == (3, 3)


def test_unpreparable_mods_folder_raises(tmp_path):
    install_dir = tmp_path / "install"
    install_dir.write_text("a file, not a directory")

    with pytest.raises(ModLinkError):
        ModLinkHandler().materialize_links(install_dir, tmp_path / "mods", {})


def test_single_link_failure_is_skipped(library, monkeypatch):
    mods_root, install_dir = library
    real_symlink = os.symlink

    def flaky_symlink(src, dst, target_is_directory=False):
        if os.path.basename(dst) == "beta":
            raise PermissionError("denied")
        real_symlink(src, dst, target_is_directory=target_is_directory)

    monkeypatch.setattr(os, "symlink", flaky_symlink)

    assert ModLinkHandler().materialize_links(install_dir, mods_root, {}) == (2, 3)
    assert _linked(install_dir) == ["alpha", "gamma"]


def test_unhiding_a_mod_adds_exactly_its_link(library):
    mods_root, install_dir = library
    handler = ModLinkHandler()
    handler.materialize_links(install_dir, mods_root, {"alpha": True, "beta": False})
    before = {name: os.readlink(install_dir / "mods" / name) for name in _linked(install_dir)}

    handler.materialize_links(install_dir, mods_root, {"alpha": True, "beta": True})

    assert _linked(install_dir) == ["alpha", "beta", "gamma"]
    for name, target in before.items():
        assert os.readlink(install_dir / "mods" / name) == target


def test_install_locks_are_released_after_rebuild(library):
    mods_root, install_dir = library

    ModLinkHandler().materialize_links(install_dir, mods_root, {})

    assert os.path.normcase(os.path.abspath(install_dir)) not in ModLinkHandler._locks
