import json

from genesis.backend.handlers.config_handler import CONFIG_VERSION, DEFAULT_SETTINGS, ConfigHandler


def test_defaults_without_settings_file(config_handler):
    assert config_handler.get("theme") == "funkin"
    assert config_handler.get("autoLaunch") is True
    assert config_handler.get_mod_visibility() == {}
    assert config_handler.get_all()["version"] == CONFIG_VERSION


def test_singleton(config_handler):
    assert ConfigHandler() is config_handler


def test_values_are_read_fresh_from_disk(config_handler, data_dir):
    data_dir.mkdir(parents=True, exist_ok=True)
    (data_dir / "settings.json").write_text(json.dumps({"version": CONFIG_VERSION, "theme": "dark"}))

    assert config_handler.get("theme") == "dark"
    assert config_handler.get("language") == DEFAULT_SETTINGS["language"]


def test_visibility_round_trips_through_file(config_handler, data_dir):
    assert config_handler.set_mod_visible("tord", False)
    assert config_handler.set_mod_visible("psych-pack", True)

    saved = json.loads((data_dir / "settings.json").read_text())
    assert saved["modVisibility"] == {"tord": False, "psych-pack": True}

    ConfigHandler.reset_instance()
    assert ConfigHandler().get_mod_visibility() == {"tord": False, "psych-pack": True}


def test_forget_mod(config_handler):
    config_handler.set_mod_visible("tord", False)

    assert config_handler.forget_mod("tord")
    assert config_handler.forget_mod("never-seen")
    assert config_handler.get_mod_visibility() == {}


def test_old_settings_are_migrated(data_dir):
    data_dir.mkdir(parents=True)
    (data_dir / "settings.json").write_text(json.dumps({
        "version": "0.1.0", "theme": "dark", "modsLinked": True, "modVisibility": [],
    }))

    handler = ConfigHandler()

    saved = json.loads((data_dir / "settings.json").read_text())
    assert saved["version"] == CONFIG_VERSION
    assert saved["theme"] == "dark"
    assert "modsLinked" not in saved
    assert handler.get_mod_visibility() == {}


def test_corrupt_settings_fall_back_to_defaults(data_dir):
    data_dir.mkdir(parents=True)
    (data_dir / "settings.json").write_text("{ not json")

    handler = ConfigHandler()

    assert handler.get("theme") == "funkin"
    assert handler.get_mod_visibility() == {}
