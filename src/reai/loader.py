"""Config loader: active provider configs from storage, with environment fallback."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING

from reai.config import ProviderConfig, config_from_env
from reai.errors import ConfigurationError
from reai.events import ConfigFallbackEvent, LoggingReporter

if TYPE_CHECKING:
    from reai.events import EventReporter, FallbackReason
    from reai.store import SettingsStore

logger = logging.getLogger(__name__)


@dataclass
class ConfigCache:
    """Snapshot of loaded configs; cleared wholesale, never partially updated."""

    configs: tuple[ProviderConfig, ...] | None = None
    primary: ProviderConfig | None = None

    @property
    def is_loaded(self) -> bool:
        """Whether a snapshot is present."""
        return self.configs is not None

    def store(self, configs: list[ProviderConfig]) -> None:
        """Replace the snapshot with *configs* (primary is the flagged one)."""
        self.configs = tuple(configs)
        self.primary = next((c for c in configs if c.is_primary), None)

    def clear(self) -> None:
        """Drop the snapshot."""
        self.configs = None
        self.primary = None


def ensure_single_primary(configs: list[ProviderConfig]) -> list[ProviderConfig]:
    """Return *configs* with exactly one primary, flagged configs sorted first.

    When none is flagged the first config is promoted. When several are
    flagged only the first keeps the flag.
    """
    if not configs:
        return []
    ordered = sorted(configs, key=lambda c: not c.is_primary)
    result = [ordered[0].with_primary(True)]
    result.extend(c.with_primary(False) if c.is_primary else c for c in ordered[1:])
    return result


@dataclass
class ConfigLoader:
    """Load and cache all active AI provider configs.

    Storage errors never propagate: they are logged, reported as a
    ``ConfigFallbackEvent`` and degrade to the environment fallback.
    """

    store: SettingsStore | None = None
    cache: ConfigCache = field(default_factory=ConfigCache)
    reporter: EventReporter = field(default_factory=LoggingReporter)

    def __post_init__(self) -> None:
        """Accept None for the cache or reporter and use the defaults."""
        if self.cache is None:
            self.cache = ConfigCache()
        if self.reporter is None:
            self.reporter = LoggingReporter()

    async def load_all_active_configs(self) -> list[ProviderConfig]:
        """Return active configs, loading from storage on first use."""
        if self.cache.configs is not None:
            return list(self.cache.configs)

        configs = await self._load_from_store()
        configs = ensure_single_primary(configs)
        if configs:
            self.cache.store(configs)
            logger.debug(
                "Loaded %d AI provider config(s), primary=%s",
                len(configs),
                configs[0].provider,
            )
        return configs

    async def primary_config(self) -> ProviderConfig | None:
        """Return the primary config, loading if needed."""
        configs = await self.load_all_active_configs()
        if not configs:
            return None
        return self.cache.primary or configs[0]

    def set_active_config(self, config: ProviderConfig) -> None:
        """Replace the cached snapshot with *config* alone, as primary."""
        self.cache.store([config.with_primary(True)])

    def clear(self) -> None:
        """Invalidate the cached snapshot."""
        self.cache.clear()

    async def _load_from_store(self) -> list[ProviderConfig]:
        if self.store is None:
            return self._fallback("store_empty", "no settings store configured")

        try:
            records = await self.store.fetch_active_settings()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error("Error loading AI settings from store: %s", exc)
            return self._fallback("store_error", f"{type(exc).__name__}: {exc}")

        if not records:
            logger.warning("No active AI provider found in store, falling back to env vars")
            return self._fallback("store_empty", "no active records")

        configs: list[ProviderConfig] = []
        for record in records:
            try:
                configs.append(ProviderConfig.from_record(record))
            except ConfigurationError as exc:
                logger.warning(
                    "Skipping AI settings record for %r: %s", record.get("provider"), exc
                )
        if not configs:
            return self._fallback(
                "no_usable_records", f"{len(records)} active record(s) without credentials"
            )
        return configs

    def _fallback(self, reason: FallbackReason, detail: str) -> list[ProviderConfig]:
        env_config = config_from_env()
        self.reporter.record_event(
            ConfigFallbackEvent(
                reason=reason,
                detail=detail,
                fallback_provider=env_config.provider if env_config else None,
            )
        )
        return [env_config] if env_config else []
