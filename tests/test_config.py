"""Tests for configuration loading and path resolution."""

import json
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from provguard.errors import ConfigValidationError, MissingConfigError, PlaceholderError
from provguard.kernel.config import Configuration, find_placeholders, resolve_path
from provguard.resolver import ConfigResolver, init_config, load


def _write_json(path: Path, data: dict) -> Path:
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


class TestFindPlaceholders:
    """Tests for placeholder detection."""

    def test_top_level_placeholder(self):
        assert find_placeholders({"data_path": "<PLACEHOLDER>", "log_level": "INFO"}) == ["data_path"]

    def test_nested_and_list_placeholders(self):
        data = {
            "paths": {"atlas": "<ATLAS>", "mask": "/masks/brain.nii.gz"},
            "subjects": ["sub-01", "sub-02", " <SUBJECT> "],
        }
        assert find_placeholders(data) == ["paths.atlas", "subjects[2]"]

    def test_angle_brackets_inside_text_are_not_placeholders(self):
        data = {"formula": "a < b and c > d", "html": "<b>bold</b>", "empty": ""}
        assert find_placeholders(data) == []

    def test_non_string_values_ignored(self):
        assert find_placeholders({"seed": 3, "flag": True, "none": None}) == []


class TestLoad:
    """Tests for resolver.load."""

    def test_valid_config_loads_with_declared_keys(self, template_path, config_path, tmp_path):
        config = load(template_path, config_path)
        for key in json.loads(template_path.read_text(encoding="utf-8")):
            assert key in config
        assert config.data_path == tmp_path / "data"
        assert config.env_path == tmp_path / "envs" / "analysis"
        assert config.log_level == "INFO"
        assert config.random_seed == 42

    def test_unedited_template_copy_raises_placeholder_error(self, template_path, tmp_path):
        actual = tmp_path / "config.json"
        actual.write_text(template_path.read_text(encoding="utf-8"), encoding="utf-8")

        with pytest.raises(PlaceholderError) as excinfo:
            load(template_path, actual)

        assert "data_path" in excinfo.value.keys
        assert "data_path" in str(excinfo.value)
        assert str(actual) in str(excinfo.value)

    def test_single_remaining_placeholder_fails(self, template_path, tmp_path):
        actual = _write_json(tmp_path / "config.json", {
            "data_path": "data",
            "env_path": "env",
            "log_level": "INFO",
            "random_seed": "<SEED>",
        })
        with pytest.raises(PlaceholderError) as excinfo:
            load(template_path, actual)
        assert excinfo.value.keys == ["random_seed"]

    def test_missing_config_mentions_template_copy(self, template_path, tmp_path):
        actual = tmp_path / "config.json"
        with pytest.raises(MissingConfigError) as excinfo:
            load(template_path, actual)

        message = str(excinfo.value)
        assert "not found" in message
        assert f"cp {template_path} {actual}" in message

    def test_missing_template_raises(self, config_path, tmp_path):
        with pytest.raises(MissingConfigError) as excinfo:
            load(tmp_path / "nope.template.json", config_path)
        assert "template" in str(excinfo.value)

    def test_missing_declared_key_named(self, template_path, tmp_path):
        actual = _write_json(tmp_path / "config.json", {
            "data_path": "data",
            "log_level": "INFO",
            "random_seed": 1,
        })
        with pytest.raises(ConfigValidationError) as excinfo:
            load(template_path, actual)
        assert "env_path" in str(excinfo.value)
        assert str(template_path) in str(excinfo.value)

    def test_undeclared_key_kept_with_warning(self, template_path, config_path, caplog):
        data = json.loads(config_path.read_text(encoding="utf-8"))
        data["smoothing_fwhm"] = 6.0
        _write_json(config_path, data)

        with caplog.at_level(logging.WARNING, logger="provguard"):
            config = load(template_path, config_path)

        assert config.get("smoothing_fwhm") == 6.0
        assert "smoothing_fwhm" in caplog.text

    def test_no_template_skips_declared_keys(self, tmp_path):
        actual = _write_json(tmp_path / "config.json", {"data_path": "/srv/study"})
        config = load(None, actual)
        assert config.data_path == Path("/srv/study")
        assert config.log_level == "INFO"
        assert config.random_seed is None

    def test_invalid_log_level(self, tmp_path):
        actual = _write_json(tmp_path / "config.json", {"data_path": "d", "log_level": "LOUD"})
        with pytest.raises(ConfigValidationError) as excinfo:
            load(None, actual)
        assert "log_level" in str(excinfo.value)

    def test_bool_seed_rejected(self, tmp_path):
        actual = _write_json(tmp_path / "config.json", {"data_path": "d", "random_seed": True})
        with pytest.raises(ConfigValidationError):
            load(None, actual)

    def test_missing_data_path(self, tmp_path):
        actual = _write_json(tmp_path / "config.json", {"log_level": "INFO"})
        with pytest.raises(ConfigValidationError) as excinfo:
            load(None, actual)
        assert "data_path" in str(excinfo.value)

    def test_yaml_config(self, tmp_path):
        template = tmp_path / "config.template.yaml"
        template.write_text("data_path: <PLACEHOLDER>\nrandom_seed: <SEED>\n", encoding="utf-8")
        actual = tmp_path / "config.yaml"
        actual.write_text("data_path: ~/study\nrandom_seed: 11\n", encoding="utf-8")

        config = load(template, actual)
        assert config.data_path == Path("~/study").expanduser()
        assert config.random_seed == 11

    def test_yaml_placeholder_scenario(self, tmp_path):
        template = tmp_path / "config.template.yml"
        template.write_text("data_path: <PLACEHOLDER>\n", encoding="utf-8")
        actual = tmp_path / "config.yml"
        actual.write_text(template.read_text(encoding="utf-8"), encoding="utf-8")

        with pytest.raises(PlaceholderError, match="data_path"):
            load(template, actual)

    def test_non_mapping_document(self, tmp_path):
        actual = tmp_path / "config.yaml"
        actual.write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(ConfigValidationError, match="mapping"):
            load(None, actual)

    def test_unparsable_json(self, tmp_path):
        actual = tmp_path / "config.json"
        actual.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigValidationError, match="Could not parse"):
            load(None, actual)

    def test_unsupported_suffix(self, tmp_path):
        actual = tmp_path / "config.ini"
        actual.write_text("data_path = x\n", encoding="utf-8")
        with pytest.raises(ConfigValidationError, match="Unsupported"):
            load(None, actual)

    def test_unknown_home_directory(self, tmp_path):
        actual = _write_json(tmp_path / "config.json", {"data_path": "~no_such_user_provguard/data"})
        with pytest.raises(ConfigValidationError) as excinfo:
            load(None, actual)
        assert "data_path" in str(excinfo.value)

    def test_invalid_utf8(self, tmp_path):
        actual = tmp_path / "config.yaml"
        actual.write_bytes(b"data_path: \xff\xfe/data\n")
        with pytest.raises(ConfigValidationError, match="Could not read"):
            load(None, actual)

    def test_directory_instead_of_file(self, tmp_path):
        actual = tmp_path / "config.json"
        actual.mkdir()
        with pytest.raises(ConfigValidationError, match="Could not read"):
            load(None, actual)


class TestConfiguration:
    """Tests for the Configuration model."""

    def test_frozen(self, config):
        with pytest.raises(ValidationError):
            config.log_level = "ERROR"

    def test_get_default_for_unset(self, config):
        assert config.get("env_path", "fallback") == "fallback"
        assert config.get("not_a_key") is None

    def test_keys_include_extras(self):
        config = Configuration.model_validate({"data_path": "/d", "atlas": "harvard_oxford"})
        assert "atlas" in config.keys()
        assert "data_path" in config
        assert config.as_dict()["atlas"] == "harvard_oxford"


class TestResolvePath:
    """Tests for resolve_path."""

    def test_configured_value(self, config):
        assert resolve_path(config, "data_path", None) == config.data_path

    def test_default_when_absent(self, config, tmp_path):
        default = tmp_path / "data" / "processed"
        assert resolve_path(config, "processed_path", default) == default
        assert resolve_path(config, "no_such_key", default) == default

    def test_extra_string_value_becomes_path(self):
        config = Configuration.model_validate({"data_path": "/d", "atlas_dir": "/atlases"})
        assert resolve_path(config, "atlas_dir", None) == Path("/atlases")

    def test_never_raises(self):
        assert resolve_path(None, "data_path", "x") == "x"
        assert resolve_path({"data_path": 3}, "data_path", "x") == "x"
        assert resolve_path({"data_path": "/d"}, "data_path", "x") == Path("/d")

    def test_unknown_home_directory_gives_default(self, tmp_path):
        config = Configuration.model_validate(
            {"data_path": str(tmp_path), "atlas": "~no_such_user_provguard/a.nii"}
        )
        assert resolve_path(config, "atlas", "DEFAULT") == "DEFAULT"


class TestConfigResolver:
    """Tests for the caching resolver."""

    def test_loads_once(self, template_path, config_path):
        resolver = ConfigResolver(template_path, config_path)
        first = resolver.load()

        # Editing the file after the first load has no effect on this process
        config_path.write_text("{broken", encoding="utf-8")
        assert resolver.load() is first

    def test_resolve_path(self, template_path, config_path, tmp_path):
        resolver = ConfigResolver(template_path, config_path)
        assert resolver.resolve_path("reports_path", tmp_path / "r") == tmp_path / "r"


class TestInitConfig:
    """Tests for init_config."""

    def test_copies_template(self, template_path, tmp_path):
        actual = tmp_path / "config.json"
        assert init_config(template_path, actual) is True
        assert actual.read_text(encoding="utf-8") == template_path.read_text(encoding="utf-8")

    def test_never_overwrites(self, template_path, config_path):
        before = config_path.read_text(encoding="utf-8")
        assert init_config(template_path, config_path) is False
        assert config_path.read_text(encoding="utf-8") == before

    def test_missing_template(self, tmp_path):
        with pytest.raises(MissingConfigError):
            init_config(tmp_path / "missing.json", tmp_path / "config.json")
