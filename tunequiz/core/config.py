"""
Configuration management for tunequiz.

This module handles loading, validating, and providing access to the
pipeline configuration stored in config.yaml.

The configuration file contains:
    - Catalog provider settings (API key, base URL, request timeout)
    - Catalog tunables (cache TTL, results per category, clip duration, ...)
    - The category -> playlist id mapping

Sensitive values can come from the environment instead of the file.
A .env file in the working directory is honoured (python-dotenv):
    YOUTUBE_API_KEY     overrides provider.api_key
    TUNEQUIZ_CACHE_TTL  overrides catalog.cache_ttl

Configuration File Location:
    An explicit path may be passed to load_config(). Otherwise config.yaml
    in the current working directory is used if present, and built-in
    defaults apply if it is not.

Example config.yaml:
    provider:
      api_key: null
      timeout: 8

    catalog:
      cache_ttl: 3600
      max_results: 100
      clip_duration: 30
      shuffle_on_read: true

    categories:
      kpop: "PLxQODuHe4E5MPk6anBwqCgyfIa00KhK0c"
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from tunequiz.core.exceptions import ConfigurationError


# Default configuration file name (looked up in current working directory)
CONFIG_FILENAME = "config.yaml"

# Sentinel left in playlist ids that were never filled in
PLACEHOLDER_COLLECTION_ID = "PLxxxxxxxxxxxxxxxxxxxxxx"

DEFAULT_BASE_URL = "https://www.googleapis.com/youtube/v3"

# YouTube Data API caps playlistItems pages at 50 entries
PROVIDER_MAX_PAGE_SIZE = 50

DEFAULT_CATEGORIES: dict[str, str] = {
    "kpop": "PLxQODuHe4E5MPk6anBwqCgyfIa00KhK0c",
    "jpop": "PLj3yHoINc17ve9DMQpyU_clEGETrKSrbD",
    "thaipop": "PLpPEyOdwLH3cpKWxfSDcHP5WKK534GIfb",
    "pophits": "PLplXQ2cg9B_qrCVd1J_iId5SvP8Kf_BfS",
    "kdramaost": "PLxQODuHe4E5P729r8-TFG61BvI64eMF6G",
}

CATEGORY_INFO: dict[str, dict[str, str]] = {
    "kpop": {"name": "K-Pop", "emoji": "🇰🇷", "description": "Korean Pop Music"},
    "jpop": {"name": "J-Pop", "emoji": "🇯🇵", "description": "Japanese Pop Music"},
    "thaipop": {"name": "Thai Pop", "emoji": "🇹🇭", "description": "Thai Pop Music"},
    "pophits": {"name": "Pop Hits", "emoji": "🎤", "description": "Western Pop Music"},
    "kdramaost": {"name": "K-Drama OST", "emoji": "🎭", "description": "Korean Drama Soundtracks"},
}


@dataclass(frozen=True)
class ProviderConfig:
    """
    Catalog provider (YouTube Data API) configuration.

    Attributes:
        api_key: YouTube Data API key, or None when not configured.
                 Without a key every fetch goes to the fallback bundle.
        base_url: API root, overridable for testing or proxies.
        timeout: Request timeout in seconds. A timeout is treated as a
                 provider error and triggers the fallback path.
    """
    api_key: str | None = None
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 8.0


@dataclass(frozen=True)
class CatalogConfig:
    """
    Catalog fetching and caching tunables.

    Attributes:
        cache_ttl: Seconds a fetched category stays cached. Default: 3600.
        max_results: Tracks returned per category by default. Default: 100.
        page_size: Items requested per provider page (max 50). Default: 50.
        max_pages: Provider pages read per fetch. Default: 1.
        clip_duration: Playback window length in seconds. Default: 30.
        shuffle_on_read: Shuffle tracks before truncating to max_results.
        fallback_file: YAML bundle of pre-normalized tracks, or None for
                       the bundle shipped with the package.
    """
    cache_ttl: int = 3600
    max_results: int = 100
    page_size: int = PROVIDER_MAX_PAGE_SIZE
    max_pages: int = 1
    clip_duration: int = 30
    shuffle_on_read: bool = True
    fallback_file: Path | None = None


@dataclass(frozen=True)
class Config:
    """
    Complete pipeline configuration.

    Created by load_config() and treated as immutable.

    Attributes:
        provider: Provider credentials and transport settings.
        catalog: Caching and fetching tunables.
        categories: Category key -> provider playlist id.

    Example:
        config = load_config()
        print(f"Caching for {config.catalog.cache_ttl}s")
        print(f"K-Pop playlist: {config.categories['kpop']}")
    """
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    categories: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_CATEGORIES))


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml and the environment.

    Args:
        config_path: Optional explicit path to the config file.
                     If None, config.yaml in the current working directory
                     is used when it exists, otherwise defaults apply.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigurationError: If an explicit config file is not found, the
                            YAML is invalid, or a value fails validation.

    Behavior:
        1. Load .env into the process environment (existing vars win)
        2. Locate and parse the YAML file (if any)
        3. Validate each section, applying defaults for missing values
        4. Apply environment overrides (YOUTUBE_API_KEY, TUNEQUIZ_CACHE_TTL)
    """
    load_dotenv(Path.cwd() / ".env")

    if config_path is not None:
        if not config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}",
                details={"file_path": str(config_path)}
            )
        raw_config = _read_yaml(config_path)
    else:
        default_path = Path.cwd() / CONFIG_FILENAME
        raw_config = _read_yaml(default_path) if default_path.exists() else {}

    _validate_config_structure(raw_config)

    provider = _parse_provider_config(raw_config.get("provider") or {})
    catalog = _parse_catalog_config(raw_config.get("catalog") or {})
    categories = _parse_categories(raw_config.get("categories"))

    return _apply_environment(Config(provider=provider, catalog=catalog, categories=categories))


def _read_yaml(path: Path) -> dict[str, Any]:
    """Read a YAML file, mapping parse failures to ConfigurationError."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML syntax in {path}: {e}",
            details={"file_path": str(path), "original_error": str(e)}
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read configuration file {path}: {e}",
            details={"file_path": str(path)}
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            "Configuration root must be a mapping",
            details={"file_path": str(path)}
        )
    return data


def _validate_config_structure(raw_config: dict[str, Any]) -> None:
    """
    Check that every known section, when present, is a dictionary.

    Raises:
        ConfigurationError: If a section has the wrong shape.
    """
    for section in ("provider", "catalog", "categories"):
        value = raw_config.get(section)
        if value is not None and not isinstance(value, dict):
            raise ConfigurationError(
                f"Section '{section}' must be a dictionary",
                details={"section": section}
            )


def _parse_provider_config(provider_section: dict[str, Any]) -> ProviderConfig:
    """
    Parse and validate the provider configuration section.

    Raises:
        ConfigurationError: If api_key is not a string or timeout is not
                            a positive number.
    """
    api_key = provider_section.get("api_key")
    if api_key is not None:
        if not isinstance(api_key, str):
            raise ConfigurationError(
                "'provider.api_key' must be a string or null",
                details={"field": "provider.api_key"}
            )
        api_key = api_key.strip() or None

    base_url = provider_section.get("base_url", DEFAULT_BASE_URL)
    if not isinstance(base_url, str) or not base_url.strip():
        raise ConfigurationError(
            "'provider.base_url' must be a non-empty string",
            details={"field": "provider.base_url"}
        )

    timeout = provider_section.get("timeout", 8.0)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigurationError(
            "'provider.timeout' must be a positive number",
            details={"field": "provider.timeout", "value": timeout}
        )

    return ProviderConfig(
        api_key=api_key,
        base_url=base_url.strip().rstrip("/"),
        timeout=float(timeout)
    )


def _parse_catalog_config(catalog_section: dict[str, Any]) -> CatalogConfig:
    """
    Parse and validate the catalog configuration section.

    Applies defaults for fields that are not specified.

    Raises:
        ConfigurationError: If a numeric field is not a positive integer,
                            page_size exceeds the provider maximum, or
                            fallback_file does not exist.
    """
    defaults = CatalogConfig()
    values: dict[str, Any] = {}

    for name in ("cache_ttl", "max_results", "page_size", "max_pages", "clip_duration"):
        raw = catalog_section.get(name)
        if raw is None:
            continue
        if isinstance(raw, bool) or not isinstance(raw, int) or raw < 1:
            raise ConfigurationError(
                f"'catalog.{name}' must be a positive integer",
                details={"field": f"catalog.{name}", "value": raw}
            )
        values[name] = raw

    if values.get("page_size", defaults.page_size) > PROVIDER_MAX_PAGE_SIZE:
        raise ConfigurationError(
            f"'catalog.page_size' cannot exceed {PROVIDER_MAX_PAGE_SIZE}",
            details={"field": "catalog.page_size", "value": values["page_size"]}
        )

    shuffle = catalog_section.get("shuffle_on_read")
    if shuffle is not None:
        if not isinstance(shuffle, bool):
            raise ConfigurationError(
                "'catalog.shuffle_on_read' must be true or false",
                details={"field": "catalog.shuffle_on_read"}
            )
        values["shuffle_on_read"] = shuffle

    raw_fallback = catalog_section.get("fallback_file")
    if raw_fallback is not None:
        if not isinstance(raw_fallback, str):
            raise ConfigurationError(
                "'catalog.fallback_file' must be a string path or null",
                details={"field": "catalog.fallback_file"}
            )
        fallback_path = Path(raw_fallback).expanduser().resolve()
        if not fallback_path.exists():
            raise ConfigurationError(
                f"Fallback file not found: {fallback_path}",
                details={"field": "catalog.fallback_file", "path": str(fallback_path)}
            )
        values["fallback_file"] = fallback_path

    return CatalogConfig(**values)


def _parse_categories(categories_section: dict[str, Any] | None) -> dict[str, str]:
    """
    Parse the category mapping, falling back to the built-in playlists.

    Placeholder ids are accepted here on purpose: they are reported per
    category at fetch time so the other categories keep working.

    Raises:
        ConfigurationError: If a key or value is not a non-empty string.
    """
    if categories_section is None:
        return dict(DEFAULT_CATEGORIES)

    categories: dict[str, str] = {}
    for key, collection_id in categories_section.items():
        if not isinstance(key, str) or not key.strip():
            raise ConfigurationError(
                "Category keys must be non-empty strings",
                details={"field": "categories", "key": key}
            )
        if not isinstance(collection_id, str) or not collection_id.strip():
            raise ConfigurationError(
                f"'categories.{key}' must be a non-empty playlist id",
                details={"field": f"categories.{key}"}
            )
        categories[key.strip().lower()] = collection_id.strip()

    return categories


def _apply_environment(config: Config) -> Config:
    """
    Apply environment overrides on top of file values.

    Raises:
        ConfigurationError: If TUNEQUIZ_CACHE_TTL is not a positive integer.
    """
    api_key = os.getenv("YOUTUBE_API_KEY")
    if api_key:
        config = replace(config, provider=replace(config.provider, api_key=api_key.strip()))

    raw_ttl = os.getenv("TUNEQUIZ_CACHE_TTL")
    if raw_ttl:
        try:
            ttl = int(raw_ttl)
        except ValueError as e:
            raise ConfigurationError(
                "TUNEQUIZ_CACHE_TTL must be an integer",
                details={"value": raw_ttl}
            ) from e
        if ttl < 1:
            raise ConfigurationError(
                "TUNEQUIZ_CACHE_TTL must be positive",
                details={"value": raw_ttl}
            )
        config = replace(config, catalog=replace(config.catalog, cache_ttl=ttl))

    return config
