"""Configuration loading for the credential upload client."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from credverify.models import ClientConfig

logger = logging.getLogger(__name__)

BASE_URL_ENV = "CREDVERIFY_BASE_URL"
DEFAULT_CONFIG_PATH = Path("config/client_config.json")


def load_client_config(
    config_path: Path | None = None,
    base_url: str | None = None,
) -> ClientConfig:
    """Load client configuration from JSON, falling back to defaults.

    Reads from ``config/client_config.json`` when *config_path* is ``None``.
    If the file does not exist, returns a ``ClientConfig`` with defaults.
    Unrecognised keys in the file are ignored.

    The backend URL is resolved in order: explicit *base_url* argument,
    ``CREDVERIFY_BASE_URL`` environment variable, file, default.

    Args:
        config_path: Optional explicit path to client_config.json.
        base_url: Optional URL override (e.g. from a CLI option).

    Returns:
        ClientConfig populated from file + environment overrides.

    Raises:
        ValueError: If the file is not a JSON object.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    data: dict = {}
    if config_path.exists():
        with open(config_path) as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{config_path} must contain a JSON object")
        logger.debug("Loaded client config from %s", config_path)

    # Build kwargs from JSON data, only including recognised fields
    field_names = {f.name for f in ClientConfig.__dataclass_fields__.values()}
    kwargs = {k: v for k, v in data.items() if k in field_names}
    ignored = sorted(set(data) - field_names)
    if ignored:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(ignored))

    env_url = os.environ.get(BASE_URL_ENV)
    if env_url:
        kwargs["base_url"] = env_url
    if base_url:
        kwargs["base_url"] = base_url

    return ClientConfig(**kwargs)
