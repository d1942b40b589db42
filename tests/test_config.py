"""Tests for dubstash.config."""

import pytest

from dubstash.config import EngineConfig, load_engine_config
from dubstash.runtime import DEFAULT_MAX_DEPTH, Runtime


@pytest.fixture
def write_config(tmp_path):
    def _write(content: str):
        path = tmp_path / "engine.yaml"
        path.write_text(content)
        return str(path)

    return _write


class TestLoadEngineConfig:
    def test_full_config(self, write_config):
        path = write_config(
            "max_depth: 8\n"
            "templates:\n"
            "  footer: '(c) {{YEAR}}'\n"
            "data:\n"
            "  YEAR: 2024\n"
            "  SITE:\n"
            "    title: Docs\n"
        )
        config = load_engine_config(path)
        assert config.max_depth == 8
        assert config.templates == {"footer": "(c) {{YEAR}}"}
        assert config.data == {"YEAR": 2024, "SITE": {"title": "Docs"}}

    def test_empty_file_gives_defaults(self, write_config):
        assert load_engine_config(write_config("")) == EngineConfig()

    def test_empty_sections(self, write_config):
        config = load_engine_config(write_config("templates:\ndata:\n"))
        assert config.templates == {}
        assert config.data == {}

    def test_unknown_key_raises(self, write_config):
        with pytest.raises(ValueError, match="Unknown top-level keys"):
            load_engine_config(write_config("template: {}\n"))

    def test_non_mapping_raises(self, write_config):
        with pytest.raises(ValueError, match="must be a mapping"):
            load_engine_config(write_config("- a\n- b\n"))

    def test_section_must_be_mapping(self, write_config):
        with pytest.raises(ValueError, match="'data' must be a mapping"):
            load_engine_config(write_config("data: [1, 2]\n"))

    def test_template_must_be_string(self, write_config):
        with pytest.raises(ValueError, match="Template 'x' must be a string"):
            load_engine_config(write_config("templates:\n  x: [1]\n"))

    @pytest.mark.parametrize("value", ["0", "-3", "deep"])
    def test_bad_max_depth(self, write_config, value):
        with pytest.raises(ValueError, match="max_depth"):
            load_engine_config(write_config(f"max_depth: {value}\n"))


class TestRuntimeFromConfig:
    def test_registers_globals(self):
        config = EngineConfig(
            max_depth=5,
            templates={"footer": "(c) {{YEAR}}"},
            data={"YEAR": 2024},
        )
        runtime = Runtime.from_config(config)
        assert runtime.max_depth == 5
        assert runtime.compile("{{footer}}")({}) == "(c) 2024"

    def test_default_depth(self, monkeypatch):
        monkeypatch.delenv("DUBSTASH_MAX_DEPTH", raising=False)
        assert Runtime.from_config(EngineConfig()).max_depth == DEFAULT_MAX_DEPTH
