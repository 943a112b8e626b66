import pytest

from conftest import FakeResponse
from genesis.backend.models.catalog import Catalog, natural_version_key
from genesis.backend.services.catalog_service import CatalogService

CATALOG_YAML = """
engines:
  - id: psych
    name: Psych Engine
    icon: icons/psych.png
    executable_name: PsychEngine
    versions:
      - version: "0.7.3"
        download_urls:
          windows: https://builds.example/psych-0.7.3-win.zip
      - version: "1.0.4"
        download_urls:
          windows: https://builds.example/psych-1.0.4-win.zip
          linux: https://builds.example/psych-1.0.4-linux.zip
  - id: codename
    name: Codename Engine
    executable_name: CodenameEngine
    versions:
      - version: "1.0"
        download_urls:
          windows: https://builds.example/codename.zip
"""


@pytest.fixture
def local_catalog(tmp_path):
    path = tmp_path / "versions.yaml"
    path.write_text(CATALOG_YAML, encoding="utf-8")
    return path


def test_natural_version_order():
    versions = ["0.2.9", "0.2.10", "0.10", "0.2.8a", "1.0"]

    assert sorted(versions, key=natural_version_key, reverse=True) == ["1.0", "0.10", "0.2.10", "0.2.9", "0.2.8a"]


def test_load_local_catalog(local_catalog):
    catalog = CatalogService(remote_url=None, local_path=local_catalog).load()

    psych = catalog.get_engine("psych")
    assert psych.display_name == "Psych Engine"
    assert psych.icon_is_path
    assert [v.version for v in psych.versions] == ["1.0.4", "0.7.3"]
    assert psych.get_version("1.0.4").download_urls["linux"].endswith("linux.zip")
    assert catalog.get_engine("codename").icon_ref is None


def test_remote_catalog_is_preferred(http, tmp_path):
    http.add("https://catalog.example/versions.yaml", FakeResponse(200, CATALOG_YAML.encode()))

    catalog = CatalogService("https://catalog.example/versions.yaml", tmp_path / "missing.yaml").load()

    assert [e.id for e in catalog.engines] == ["psych", "codename"]


def test_remote_failure_falls_back_to_local(http, local_catalog):
    http.add("https://catalog.example/versions.yaml", FakeResponse(503))

    catalog = CatalogService("https://catalog.example/versions.yaml", local_catalog).load()

    assert catalog.get_engine("codename") is not None


def test_nothing_available_gives_empty_catalog(http, tmp_path):
    catalog = CatalogService("https://offline.example/versions.yaml", tmp_path / "missing.yaml").load()

    assert catalog.engines == []


def test_duplicate_engine_ids_are_rejected(tmp_path):
    data = {"engines": [
        {"id": "psych", "executable_name": "PsychEngine"},
        {"id": "psych", "executable_name": "PsychEngine"},
    ]}

    with pytest.raises(ValueError):
        Catalog.from_dict(data)

    path = tmp_path / "versions.yaml"
    path.write_text("engines:\n  - {id: a, executable_name: A}\n  - {id: a, executable_name: A}\n")
    assert CatalogService(remote_url=None, local_path=path).load().engines == []


def test_entry_without_executable_is_invalid():
    with pytest.raises(ValueError):
        Catalog.from_dict({"engines": [{"id": "psych"}]})
