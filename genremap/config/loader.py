"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ──────────────────────────────────────────
#
# Configuration is loaded in layers (later layers override earlier):
#
#   1. Field defaults     : declared on Settings
#   2. config/config.yaml : static defaults checked into the repo
#   3. .env file / env vars: local or deploy-time overrides
#   4. Explicit overrides : CLI flags passed to load_settings()
#
# The YAML file groups keys into sections (site, pipeline, http, logging)
# purely for readability; every key inside a section must be a Settings
# field name.  Sections are flattened before validation:
#   {"pipeline": {"batch_size": 100}}  →  {"batch_size": 100}
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from genremap.config.settings import Settings
from genremap.utils.errors import ConfigurationError


def load_settings(path: str = "config/config.yaml", **overrides: Any) -> Settings:
    """Load YAML config and merge it with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  A missing file is not
            an error; defaults and the environment are used instead.
        **overrides: Highest-priority values (typically CLI flags).  ``None``
            values are ignored so unset flags do not mask lower layers.

    Returns:
        A validated :class:`Settings` instance.

    Raises:
        ConfigurationError: If the YAML is malformed, names an unknown key,
            or any layer supplies an invalid value.
    """
    yaml_values = _read_yaml(Path(path))

    try:
        # Values present in the environment or .env show up in
        # model_fields_set; YAML must not override those.
        env_settings = Settings()
        merged = {
            key: value
            for key, value in yaml_values.items()
            if key not in env_settings.model_fields_set
        }
        merged.update({key: value for key, value in overrides.items() if value is not None})
        return Settings(**merged)
    except ValidationError as exc:
        raise ConfigurationError(message=f"invalid settings: {exc}") from exc


def _read_yaml(config_path: Path) -> dict[str, Any]:
    """Read and flatten the sectioned YAML document at *config_path*."""
    if not config_path.exists():
        return {}

    try:
        with open(config_path, encoding="utf-8") as f:
            # safe_load only builds plain Python types from the document.
            document = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(message=f"cannot parse {config_path}: {exc}") from exc

    if not isinstance(document, dict):
        raise ConfigurationError(message=f"{config_path} must contain a mapping")

    flat: dict[str, Any] = {}
    for section, values in document.items():
        if not isinstance(values, dict):
            raise ConfigurationError(
                message=f"section {section!r} in {config_path} must be a mapping"
            )
        flat.update(values)

    unknown = set(flat) - set(Settings.model_fields)
    if unknown:
        raise ConfigurationError(
            message=f"unknown keys in {config_path}: {', '.join(sorted(unknown))}"
        )
    return flat
