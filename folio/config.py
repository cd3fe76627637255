"""Site configuration for Folio.

Configuration is read from ``folio.yaml`` in the source root (or an
explicit path) and merged over ``DEFAULT_CONFIG``. Unknown keys are kept in
``SiteConfig.extra`` and exposed to templates under ``site.data``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from .content import CONFIG_FILENAME
from .errors import ConfigError
from .renderers import DEFAULT_EXCERPT_LENGTH
from .utils import DEFAULT_EXTENSIONS

DEFAULT_CONFIG: dict[str, Any] = {
    "title": "Folio",
    "url": "",
    "description": "",
    "language": "en",
    "excerpt_length": DEFAULT_EXCERPT_LENGTH,
    "allow_raw_html": False,
    "recent_posts": 5,
    "page_dirs": ["pages"],
    "extensions": list(DEFAULT_EXTENSIONS),
    "static_dir": None,
    "feeds": True,
    "archive": False,
    "clean": True,
    "workers": None,
    "strict": False,
}


@dataclass(frozen=True)
class SiteConfig:
    """Settings for one build.

    Attributes mirror the keys of ``DEFAULT_CONFIG``; ``extra`` holds any
    other keys found in the config file.
    """

    title: str = DEFAULT_CONFIG["title"]
    url: str = DEFAULT_CONFIG["url"]
    description: str = DEFAULT_CONFIG["description"]
    language: str = DEFAULT_CONFIG["language"]
    excerpt_length: int = DEFAULT_CONFIG["excerpt_length"]
    allow_raw_html: bool = DEFAULT_CONFIG["allow_raw_html"]
    recent_posts: int = DEFAULT_CONFIG["recent_posts"]
    page_dirs: tuple[str, ...] = tuple(DEFAULT_CONFIG["page_dirs"])
    extensions: tuple[str, ...] = tuple(DEFAULT_CONFIG["extensions"])
    static_dir: str | None = None
    feeds: bool = True
    archive: bool = False
    clean: bool = True
    workers: int | None = None
    strict: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(
        cls, mapping: dict[str, Any], source: Path | str = CONFIG_FILENAME
    ) -> SiteConfig:
        """Build a config from a plain mapping, applying defaults.

        Raises:
            ConfigError: A known key has a value of the wrong type or range.
        """
        merged = DEFAULT_CONFIG.copy()
        merged.update(mapping)
        known = {f.name for f in fields(cls)} - {"extra"}
        values = {k: _validate(k, v, source) for k, v in merged.items() if k in known}
        extra = {k: v for k, v in merged.items() if k not in known}
        return cls(extra=extra, **values)


STRING_KEYS = ("title", "url", "description", "language")
OPTIONAL_STRING_KEYS = ("static_dir",)
BOOL_KEYS = ("allow_raw_html", "feeds", "archive", "clean", "strict")
LIST_KEYS = ("page_dirs", "extensions")
# key -> (minimum, whether null is allowed)
INT_KEYS = {"excerpt_length": (0, False), "recent_posts": (0, False), "workers": (1, True)}


def _validate(key: str, value: Any, source: Path | str) -> Any:
    if key in STRING_KEYS:
        if value is None and key != "title":
            return ""
        if not isinstance(value, str):
            raise ConfigError(source, f"'{key}' must be a string, got {value!r}")
        return value
    if key in OPTIONAL_STRING_KEYS:
        if value is not None and not isinstance(value, str):
            raise ConfigError(source, f"'{key}' must be a string, got {value!r}")
        return value or None
    if key in BOOL_KEYS:
        if not isinstance(value, bool):
            raise ConfigError(source, f"'{key}' must be true or false, got {value!r}")
        return value
    if key in LIST_KEYS:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ConfigError(source, f"'{key}' must be a list of strings, got {value!r}")
        return tuple(value)
    minimum, nullable = INT_KEYS[key]
    if value is None and nullable:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise ConfigError(
            source, f"'{key}' must be an integer of at least {minimum}, got {value!r}"
        )
    return value


def load_config(source_root: Path, config_path: Path | None = None) -> SiteConfig:
    """Load site configuration.

    Args:
        source_root: Source directory; ``folio.yaml`` there is used when no
            explicit path is given.
        config_path: Optional explicit config file.

    Returns:
        SiteConfig with defaults applied. A missing file or a document that
        is not a mapping yields the defaults.

    Raises:
        ConfigError: The file is not valid UTF-8 YAML, or a value has the
            wrong type.
    """
    path = Path(config_path) if config_path else Path(source_root) / CONFIG_FILENAME
    loaded: Any = {}
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except (yaml.YAMLError, ValueError) as exc:
            raise ConfigError(path, f"Config is not valid UTF-8 YAML: {exc}", exc) from exc
    if not isinstance(loaded, dict):
        loaded = {}
    return SiteConfig.from_mapping(loaded, path)
