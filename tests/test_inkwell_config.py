"""Tests for src/inkwell/config.py — InkwellConfig, TOML loading, overrides."""

from pathlib import Path

import pydantic
import pytest
from inkwell.config import (
    HANGUL_SYLLABLES,
    InkwellConfig,
    SlugSectionConfig,
    StoreBackend,
    load_config,
    merge_cli_overrides,
)
from inkwell.errors import ConfigError, StoreError
from inkwell.store import open_store
from inkwell.store.local import LocalDocumentStore
from inkwell.store.rest import RestDocumentStore

_ENV_VARS = (
    "SUPABASE_URL",
    "SUPABASE_KEY",
    "INKWELL_STORE_BACKEND",
    "INKWELL_STORE_PATH",
    "INKWELL_AUTOSAVE_INTERVAL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Remove env vars that _apply_env_vars reads so tests see TOML values."""
    for key in _ENV_VARS:
        monkeypatch.delenv(key, raising=False)


class TestDefaults:
    def test_store(self):
        cfg = InkwellConfig()
        assert cfg.store.backend == StoreBackend.LOCAL
        assert cfg.store.path == ".inkwell-store.json"

    def test_drafts_and_slug(self):
        cfg = InkwellConfig()
        assert cfg.drafts.list_limit == 10
        assert cfg.drafts.autosave_interval == 60.0
        assert cfg.slug.extra_letters == HANGUL_SYLLABLES
        assert cfg.slug.max_attempts == 10

    def test_supabase_unconfigured(self):
        assert InkwellConfig().supabase.is_configured is False


class TestLoadConfig:
    def test_explicit_path(self, tmp_path: Path):
        path = tmp_path / "blog.toml"
        path.write_text(
            '[store]\nbackend = "supabase"\n\n'
            '[supabase]\nurl = "https://p.supabase.co"\nkey = "k"\n\n'
            "[drafts]\nlist_limit = 5\n",
            encoding="utf-8",
        )
        cfg = load_config(path)
        assert cfg.store.backend == StoreBackend.SUPABASE
        assert cfg.supabase.is_configured is True
        assert cfg.drafts.list_limit == 5

    def test_missing_path_gives_defaults(self, tmp_path: Path, caplog):
        cfg = load_config(tmp_path / "nope.toml")
        assert cfg == InkwellConfig()
        assert "Config file not found" in caplog.text

    def test_invalid_toml_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "bad.toml"
        path.write_text("[store\n", encoding="utf-8")
        assert load_config(path) == InkwellConfig()

    def test_cwd_file_found(self, tmp_path: Path, monkeypatch):
        (tmp_path / ".inkwell.toml").write_text('[store]\npath = "posts.json"\n', encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        assert load_config().store.path == "posts.json"

    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch):
        path = tmp_path / "blog.toml"
        path.write_text('[supabase]\nurl = "https://toml"\n', encoding="utf-8")
        monkeypatch.setenv("SUPABASE_URL", "https://env")
        monkeypatch.setenv("INKWELL_AUTOSAVE_INTERVAL", "15")
        cfg = load_config(path)
        assert cfg.supabase.url == "https://env"
        assert cfg.drafts.autosave_interval == 15.0

    def test_bad_env_value_raises_config_error(self, monkeypatch):
        monkeypatch.setenv("INKWELL_AUTOSAVE_INTERVAL", "abc")
        with pytest.raises(ConfigError, match="environment variables"):
            load_config()

    def test_bad_toml_value_raises_config_error(self, tmp_path: Path):
        path = tmp_path / "blog.toml"
        path.write_text("[drafts]\nlist_limit = \"many\"\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="config file"):
            load_config(path)


class TestSlugSection:
    @pytest.mark.parametrize("letters", ["]", "[a", "\\", "z-a"])
    def test_rejects_broken_character_class(self, letters):
        with pytest.raises(pydantic.ValidationError):
            SlugSectionConfig(extra_letters=letters)

    def test_accepts_letter_ranges(self):
        assert SlugSectionConfig(extra_letters="à-ÿ").extra_letters == "à-ÿ"


class TestMergeCliOverrides:
    def test_only_set_values_applied(self):
        cfg = merge_cli_overrides(InkwellConfig(), store_path="other.json", store_backend=None)
        assert cfg.store.path == "other.json"
        assert cfg.store.backend == StoreBackend.LOCAL

    def test_unknown_keys_ignored(self):
        assert merge_cli_overrides(InkwellConfig(), nonsense="x") == InkwellConfig()

    def test_only_flags_the_cli_exposes_are_mapped(self):
        cfg = merge_cli_overrides(InkwellConfig(), supabase_url="https://x", autosave_interval=1.0)
        assert cfg == InkwellConfig()


class TestOpenStore:
    def test_local(self, tmp_path: Path):
        cfg = merge_cli_overrides(InkwellConfig(), store_path=str(tmp_path / "s.json"))
        assert isinstance(open_store(cfg), LocalDocumentStore)

    def test_supabase(self):
        cfg = InkwellConfig.model_validate({
            "store": {"backend": "supabase"},
            "supabase": {"url": "https://p.supabase.co", "key": "k"},
        })
        assert isinstance(open_store(cfg), RestDocumentStore)

    def test_supabase_unconfigured(self):
        cfg = InkwellConfig.model_validate({"store": {"backend": "supabase"}})
        with pytest.raises(StoreError):
            open_store(cfg)
