"""Configuration helpers for the item page generator."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path

LOGGER = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.osrs.lol"
DEFAULT_API_BASE = "https://prices.runescape.wiki/api/v1/osrs"
DEFAULT_USER_AGENT = "osrs.lol bot"
DEFAULT_BATCH_SIZE = 50
DEFAULT_RATE_LIMIT_SECONDS = 0.1


@dataclass(frozen=True)
class SiteSettings:
    """Everything a single build needs to know, fixed for the whole run."""

    site_name: str = "GrandFreexchange"
    base_url: str = DEFAULT_BASE_URL
    output_dir: Path = Path(".")
    items_dirname: str = "items"
    sitemap_filename: str = "sitemap.xml"
    batch_size: int = DEFAULT_BATCH_SIZE
    rate_limit_seconds: float = DEFAULT_RATE_LIMIT_SECONDS
    user_agent: str = DEFAULT_USER_AGENT
    api_base: str = DEFAULT_API_BASE
    request_timeout: float | None = None
    max_reported_errors: int = 10
    progress_every: int = 100
    icon_url: str = "https://oldschool.runescape.wiki/images/Coins_10000.png"

    def __post_init__(self) -> None:
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.rate_limit_seconds < 0:
            raise ValueError("rate_limit_seconds cannot be negative")
        object.__setattr__(self, "output_dir", Path(self.output_dir))

    @property
    def items_dir(self) -> Path:
        return self.output_dir / self.items_dirname

    @property
    def sitemap_path(self) -> Path:
        return self.output_dir / self.sitemap_filename

    @property
    def mapping_url(self) -> str:
        return f"{self.api_base.rstrip('/')}/mapping"

    @property
    def latest_url(self) -> str:
        return f"{self.api_base.rstrip('/')}/latest"

    @property
    def volumes_url(self) -> str:
        return f"{self.api_base.rstrip('/')}/volumes"

    def with_overrides(self, **changes: object) -> "SiteSettings":
        """Return a copy with the non-``None`` values in ``changes`` applied."""

        applied = {key: value for key, value in changes.items() if value is not None}
        if not applied:
            return self
        return replace(self, **applied)


def _env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None:
        return default
    value = value.strip()
    return value or default


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        LOGGER.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default


def _env_float(name: str, default: float | None) -> float | None:
    raw = _env(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        LOGGER.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default


def load_settings() -> SiteSettings:
    """Build settings from ``GEPAGES_*`` environment variables."""

    defaults = SiteSettings()
    return SiteSettings(
        site_name=_env("GEPAGES_SITE_NAME", defaults.site_name) or defaults.site_name,
        base_url=_env("GEPAGES_BASE_URL", defaults.base_url) or defaults.base_url,
        output_dir=Path(_env("GEPAGES_OUTPUT_DIR", str(defaults.output_dir)) or "."),
        batch_size=max(1, _env_int("GEPAGES_BATCH_SIZE", defaults.batch_size)),
        rate_limit_seconds=max(
            0.0,
            _env_float("GEPAGES_RATE_LIMIT_SECONDS", defaults.rate_limit_seconds)
            or 0.0,
        ),
        user_agent=_env("GEPAGES_USER_AGENT", defaults.user_agent) or defaults.user_agent,
        api_base=_env("GEPAGES_API_BASE", defaults.api_base) or defaults.api_base,
        request_timeout=_env_float("GEPAGES_REQUEST_TIMEOUT", None),
    )
