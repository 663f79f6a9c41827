"""Site configuration for Folio.

Key functions:
- load_config: Loads `_config.yml` from the source directory, with defaults.
- load_data: Loads site data from YAML files in `_data/`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigurationError

CONFIG_FILENAMES = ("_config.yml", "_config.yaml")

DEFAULT_CONFIG: dict[str, Any] = {
    "title": "",
    "description": "",
    "url": "",
    "baseurl": "",
    "destination": "_site",
    "permalink": "/:category/:year/:month/:day/:title/",
    "excerpt_separator": "\n\n",
    "default_layout": "default",
    "paginate": 0,
    "paginate_path": "/page:num/",
    "feed_limit": 20,
    "future": False,
    "theme": None,
    "exclude": [
        "Gemfile",
        "Gemfile.lock",
        "README.md",
        "LICENSE",
        "node_modules",
        "vendor",
    ],
    "include": [],
}

_INT_KEYS = ("paginate", "feed_limit")
_LIST_KEYS = ("exclude", "include")
_STR_KEYS = ("url", "baseurl", "destination", "permalink", "paginate_path")


def load_config(source_dir: Path) -> dict[str, Any]:
    """Load site configuration from `_config.yml`.

    Args:
        source_dir: Root directory of the site source.

    Returns:
        Dictionary containing configuration values, with defaults applied.

    Raises:
        ConfigurationError: If the file is not valid YAML, is not a mapping,
            or holds values of the wrong type.
    """
    config = {key: (list(value) if isinstance(value, list) else value) for key, value in DEFAULT_CONFIG.items()}
    for name in CONFIG_FILENAMES:
        config_path = source_dir / name
        if not config_path.exists():
            continue
        with open(config_path, encoding="utf-8") as f:
            try:
                loaded = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"invalid YAML: {exc}", config_path) from exc
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigurationError("configuration must be a mapping", config_path)
        config.update(loaded)
        _validate(config, config_path)
        break
    return config


def _validate(config: dict[str, Any], config_path: Path) -> None:
    for key in _INT_KEYS:
        value = config.get(key)
        if value is None:
            config[key] = 0
        elif isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ConfigurationError(
                f"'{key}' must be a non-negative integer, got {value!r}", config_path
            )
    for key in _LIST_KEYS:
        value = config.get(key) or []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            raise ConfigurationError(f"'{key}' must be a list", config_path)
        config[key] = [str(item) for item in value]
    for key in _STR_KEYS:
        value = config.get(key)
        config[key] = "" if value is None else str(value)
    if not config["destination"]:
        raise ConfigurationError("'destination' must not be empty", config_path)
    if config.get("paginate") and ":num" not in config["paginate_path"]:
        raise ConfigurationError("'paginate_path' must contain ':num'", config_path)


def load_data(source_dir: Path) -> dict[str, Any]:
    """Load site data from YAML files in the `_data` directory.

    Args:
        source_dir: Root directory of the site source.

    Returns:
        Dictionary keyed by file stem.

    Raises:
        ConfigurationError: If a data file is not valid YAML.
    """
    data_dir = source_dir / "_data"
    data: dict[str, Any] = {}
    if not data_dir.exists():
        return data
    paths = sorted([*data_dir.glob("*.yml"), *data_dir.glob("*.yaml")])
    for path in paths:
        with open(path, encoding="utf-8") as f:
            try:
                payload = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ConfigurationError(f"invalid YAML: {exc}", path) from exc
        data[path.stem] = payload
    return data


def resolve_theme_dir(source_dir: Path, config: dict[str, Any]) -> Path | None:
    """Resolve the configured theme directory.

    Raises:
        ConfigurationError: If a theme is configured but does not exist.
    """
    theme = config.get("theme")
    if not theme:
        return None
    theme_dir = (source_dir / str(theme)).resolve()
    if not theme_dir.is_dir():
        raise ConfigurationError(f"theme directory not found: {theme_dir}")
    return theme_dir
