"""Integration tests for configuration loading with layered precedence.

Exercises the real load_config() with YAML files, environment variables and
CLI overrides: defaults < YAML < ENV < CLI.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from marquee.infrastructure.config import load_config

pytestmark = pytest.mark.integration


@pytest.fixture()
def yaml_config(tmp_path: Path) -> Path:
    config = {
        "app_name": "marquee-test",
        "environment": "test",
        "http": {"timeout_seconds": 4.0, "user_agent": "TestAgent/1.0"},
        "logging": {"level": "DEBUG", "format": "console"},
        "catalog": {
            "providers": [
                {"name": "local", "base_url": "http://localhost:7000/", "streams": False}
            ],
            "search_max_results": 20,
        },
        "swarm": {"port": 9000, "cache_root": str(tmp_path / "swarm")},
        "player": {"fullscreen": False, "enabled": ["vlc"]},
    }
    path = tmp_path / "config.yaml"
    path.write_text(yaml.dump(config), encoding="utf-8")
    return path


class TestDefaultsOnly:
    def test_defaults_produce_valid_config(self) -> None:
        config = load_config()
        assert config.app_name == "marquee"
        assert config.environment == "dev"
        assert config.http_timeout_seconds == 10.0
        assert config.log_format == "console"
        assert [p.name for p in config.catalog.providers] == [
            "cinemeta",
            "torrentio",
            "thepiratebay-plus",
        ]
        assert config.swarm.port == 8888
        assert config.swarm.poll_max_attempts == 30
        assert config.player.fullscreen is True

    def test_prod_defaults_to_json_logs(self) -> None:
        assert load_config(cli_overrides={"environment": "prod"}).log_format == "json"


class TestYamlOverrides:
    def test_yaml_overrides_defaults(self, yaml_config: Path, tmp_path: Path) -> None:
        config = load_config(config_path=yaml_config)
        assert config.app_name == "marquee-test"
        assert config.http_timeout_seconds == 4.0
        assert config.log_level == "DEBUG"
        assert [p.base_url for p in config.catalog.providers] == [
            "http://localhost:7000"
        ]
        assert config.catalog.search_max_results == 20
        assert config.catalog.popular_max_results == 50
        assert config.swarm.port == 9000
        assert config.swarm.cache_root == tmp_path / "swarm"
        assert config.player.enabled == ["vlc"]

    def test_missing_yaml_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(config_path=tmp_path / "nonexistent.yaml")

    def test_non_mapping_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_config(config_path=path)

    def test_timeout_above_ceiling_is_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "slow.yaml"
        path.write_text(yaml.dump({"http": {"timeout_seconds": 30}}), encoding="utf-8")
        with pytest.raises(ValidationError):
            load_config(config_path=path)

    def test_duplicate_provider_names_are_rejected(self, tmp_path: Path) -> None:
        provider = {"name": "dup", "base_url": "https://a.example"}
        path = tmp_path / "dup.yaml"
        path.write_text(
            yaml.dump({"catalog": {"providers": [provider, provider]}}), encoding="utf-8"
        )
        with pytest.raises(ValidationError):
            load_config(config_path=path)


class TestEnvOverrides:
    def test_env_overrides_yaml(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("MARQUEE_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("MARQUEE_SWARM_PORT", "9100")
        monkeypatch.setenv("MARQUEE_PLAYER_FULLSCREEN", "true")

        config = load_config(config_path=yaml_config)
        assert config.log_level == "WARNING"
        assert config.swarm.port == 9100
        assert config.player.fullscreen is True
        assert config.app_name == "marquee-test"

    def test_dotenv_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MARQUEE_SEARCH_MAX_RESULTS", raising=False)
        dotenv = tmp_path / ".env"
        dotenv.write_text("MARQUEE_SEARCH_MAX_RESULTS=7\n", encoding="utf-8")
        try:
            config = load_config(dotenv_path=dotenv)
        finally:
            os.environ.pop("MARQUEE_SEARCH_MAX_RESULTS", None)
        assert config.catalog.search_max_results == 7

    def test_missing_dotenv_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(dotenv_path=tmp_path / "missing.env")


class TestCliOverrides:
    def test_cli_beats_yaml_and_env(
        self, yaml_config: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("MARQUEE_LOG_LEVEL", "WARNING")

        config = load_config(config_path=yaml_config, cli_overrides={"log_level": "ERROR"})
        assert config.log_level == "ERROR"

    def test_sectioned_cli_override(self, yaml_config: Path) -> None:
        config = load_config(
            config_path=yaml_config, cli_overrides={"swarm": {"poll_max_attempts": 3}}
        )
        assert config.swarm.poll_max_attempts == 3
        assert config.swarm.port == 9000


class TestSectionedDump:
    def test_round_trips_through_load(self, tmp_path: Path) -> None:
        original = load_config(cli_overrides={"swarm_port": 9200})
        path = tmp_path / "dump.yaml"
        path.write_text(yaml.dump(original.to_sectioned_dict()), encoding="utf-8")

        assert load_config(config_path=path) == original


class TestLayerShape:
    def test_lists_are_replaced_not_merged(self, tmp_path: Path) -> None:
        path = tmp_path / "lists.yaml"
        path.write_text(
            yaml.dump({"swarm": {"video_extensions": ["MKV"]}}), encoding="utf-8"
        )

        config = load_config(
            config_path=path,
            cli_overrides={
                "catalog": {
                    "providers": [{"name": "solo", "base_url": "https://solo.example"}]
                }
            },
        )

        assert config.swarm.video_extensions == [".mkv"]
        assert [p.name for p in config.catalog.providers] == ["solo"]

    def test_flat_keys_route_to_their_section(self) -> None:
        config = load_config(
            cli_overrides={
                "popular_max_results": 9,
                "catalog_min_query_length": 3,
                "http_user_agent": "Flat/1.0",
            }
        )
        assert config.catalog.popular_max_results == 9
        assert config.catalog.min_query_length == 3
        assert config.http_user_agent == "Flat/1.0"

    def test_empty_section_keeps_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("player:\n", encoding="utf-8")
        assert load_config(config_path=path).player.fullscreen is True

    def test_unknown_top_level_key_is_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "typo.yaml"
        path.write_text(yaml.dump({"cache": {"dir": "/tmp"}}), encoding="utf-8")
        with pytest.raises(ValueError, match="'cache'"):
            load_config(config_path=path)

    def test_unknown_section_key_is_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "typo.yaml"
        path.write_text(yaml.dump({"swarm": {"prot": 9000}}), encoding="utf-8")
        with pytest.raises(ValueError, match="swarm.prot"):
            load_config(config_path=path)

    def test_section_must_be_a_mapping(self) -> None:
        with pytest.raises(ValueError, match="'http' must be a mapping"):
            load_config(cli_overrides={"http": 5})
