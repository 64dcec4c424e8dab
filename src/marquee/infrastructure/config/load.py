"""Layered configuration loading.

Precedence, lowest first: ``DEFAULT_CONFIG`` < YAML file < ``MARQUEE_*``
environment < CLI overrides.

Every layer is folded into the sectioned shape of ``config.yaml`` before it
is merged. The layout is read off ``AppConfig`` itself:

- nested models (``catalog``, ``swarm``, ``player``) are sections, and
  ``<section>_<field>`` or an unambiguous bare ``<field>`` addresses one
  of their fields (``swarm_port``, ``search_max_results``);
- fields aliased with an ``AliasPath`` (``http_timeout_seconds`` ->
  ``http.timeout_seconds``) define the remaining sections;
- anything else is a top-level scalar (``app_name``, ``environment``).

Mappings merge key by key. Lists such as ``catalog.providers`` or
``swarm.video_extensions`` are replaced as a whole by the higher layer.
Unknown keys are rejected instead of being silently dropped.
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv
from pydantic import AliasChoices, AliasPath, BaseModel

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides


@dataclass(frozen=True)
class _Layout:
    top_level: frozenset[str]
    section_fields: dict[str, frozenset[str]]
    flat_keys: dict[str, tuple[str, str]]


def _alias_path(alias: Any) -> tuple[str, str] | None:
    choices = alias.choices if isinstance(alias, AliasChoices) else [alias]
    for choice in choices:
        if isinstance(choice, AliasPath) and len(choice.path) == 2:
            section, key = choice.path
            return str(section), str(key)
    return None


@lru_cache(maxsize=1)
def _layout() -> _Layout:
    top_level: set[str] = set()
    section_fields: dict[str, set[str]] = {}
    flat_keys: dict[str, tuple[str, str]] = {}
    owners: dict[str, list[str]] = {}

    for name, field in AppConfig.model_fields.items():
        model = field.annotation
        if isinstance(model, type) and issubclass(model, BaseModel):
            section_fields[name] = set(model.model_fields)
            for sub in model.model_fields:
                flat_keys[f"{name}_{sub}"] = (name, sub)
                owners.setdefault(sub, []).append(name)
            continue

        path = _alias_path(field.validation_alias)
        if path is None:
            top_level.add(name)
        else:
            section_fields.setdefault(path[0], set()).add(path[1])
            flat_keys[name] = path

    for sub, sections in owners.items():
        if len(sections) == 1 and sub not in top_level:
            flat_keys.setdefault(sub, (sections[0], sub))

    return _Layout(
        top_level=frozenset(top_level),
        section_fields={k: frozenset(v) for k, v in section_fields.items()},
        flat_keys=flat_keys,
    )


def _sectioned(layer: Mapping[str, Any], origin: str) -> dict[str, Any]:
    """Fold one layer into ``{top_level..., section: {field: value}}``."""
    layout = _layout()
    out: dict[str, Any] = {}

    for key, value in layer.items():
        if key in layout.section_fields:
            if value is None:
                continue
            if not isinstance(value, Mapping):
                raise ValueError(f"{origin}: section {key!r} must be a mapping")
            unknown = set(value) - layout.section_fields[key]
            if unknown:
                raise ValueError(
                    f"{origin}: unknown keys in {key!r}: "
                    + ", ".join(sorted(f"{key}.{u}" for u in unknown))
                )
            out.setdefault(key, {}).update(value)
        elif key in layout.flat_keys:
            section, field = layout.flat_keys[key]
            out.setdefault(section, {})[field] = value
        elif key in layout.top_level:
            out[key] = value
        else:
            raise ValueError(f"{origin}: unknown configuration key {key!r}")

    return out


def _merge(base: dict[str, Any], override: Mapping[str, Any]) -> None:
    for key, value in override.items():
        current = base.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge(current, value)
        else:
            base[key] = value


def _read_yaml(config_path: Path) -> dict[str, Any]:
    parsed = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(
            f"{config_path}: config YAML must be a mapping, got {type(parsed).__name__}"
        )
    return parsed


def _require(path: Path) -> Path:
    if not path.exists():
        raise FileNotFoundError(path)
    return path


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> AppConfig:
    """Build the validated ``AppConfig`` from all layers.

    A ``.env`` file only feeds the environment layer and never overrides
    variables that are already set. Nothing is written to disk.

    Raises:
        FileNotFoundError: ``config_path`` or ``dotenv_path`` does not exist.
        ValueError: a layer is malformed or names an unknown key.
        pydantic.ValidationError: the merged values fail validation.
    """
    if dotenv_path is not None:
        load_dotenv(_require(dotenv_path), override=False)

    layers: list[tuple[str, Mapping[str, Any]]] = [
        ("defaults", deepcopy(DEFAULT_CONFIG))
    ]
    if config_path is not None:
        layers.append((str(config_path), _read_yaml(_require(config_path))))
    layers.append(("environment", EnvOverrides().to_update_dict()))
    layers.append(("cli", cli_overrides or {}))

    merged: dict[str, Any] = {}
    for origin, layer in layers:
        _merge(merged, _sectioned(layer, origin))
    return AppConfig.model_validate(merged)
