from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .settings import AdapterSettings

logger = logging.getLogger(__name__)

ENV_PREFIX = "GOOPLEX_"

# Variables read elsewhere, never treated as settings overrides
CONTROL_VARIABLES = {"CONFIG", "LOG_LEVEL", "LOG_DIR"}

# Short names for the credential fields, as exported by most exchange tooling
CREDENTIAL_ALIASES = {
    "API_KEY": ["credentials", "api_key"],
    "SECRET": ["credentials", "secret"],
}


def _deep_set(obj: dict[str, Any], path: list[str], value: Any) -> None:
    cur: dict[str, Any] = obj
    for key in path[:-1]:
        nxt = cur.get(key)
        if not isinstance(nxt, dict):
            nxt = {}
            cur[key] = nxt
        cur = nxt
    cur[path[-1]] = value


def _parse_env_value(raw: str) -> Any:
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw


def _env_path(remainder: str) -> list[str]:
    if remainder in CREDENTIAL_ALIASES:
        return list(CREDENTIAL_ALIASES[remainder])
    return [p.lower() for p in remainder.split("__") if p]


def _apply_env_overrides(data: dict[str, Any], *, prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """Overlay ``GOOPLEX_SECTION__KEY`` variables onto the loaded mapping.

    Values are parsed as YAML scalars, except credentials, which are kept as
    the raw string so that numeric-looking keys survive.
    """
    merged: dict[str, Any] = dict(data)

    for key, raw_value in sorted(os.environ.items()):
        if not key.startswith(prefix):
            continue
        remainder = key[len(prefix) :]
        if remainder in CONTROL_VARIABLES:
            continue
        path = _env_path(remainder)
        if not path:
            continue

        value = raw_value if path[0] == "credentials" else _parse_env_value(raw_value)
        _deep_set(merged, path, value)

    return merged


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        logger.debug("No config file at %s, using defaults", path)
        return {}
    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"Config root must be a mapping, got: {type(loaded)!r}")
    return loaded


def load_settings(config_path: str | Path | None = None) -> AdapterSettings:
    """Load adapter settings from YAML plus ``GOOPLEX_*`` environment overrides.

    Args:
        config_path: YAML file; defaults to ``$GOOPLEX_CONFIG`` or ``config.yml``

    Returns:
        Validated, immutable settings

    Raises:
        ValueError: If the file is not a mapping or fails validation
    """
    if config_path is None:
        config_path = os.environ.get(f"{ENV_PREFIX}CONFIG", "config.yml")

    data = _apply_env_overrides(_read_yaml(Path(config_path)))

    try:
        settings = AdapterSettings.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc

    logger.debug("Loaded settings: %s", settings.redacted())
    return settings
