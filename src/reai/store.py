"""Settings storage seam.

The application persists one provider-settings record per AI provider. This
library only reads them, through the minimal ``SettingsStore`` protocol, so
any backend (hosted database, file, test double) can be plugged in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

SettingsRecord = dict[str, Any]


@runtime_checkable
class SettingsStore(Protocol):
    """Read access to persisted AI provider settings."""

    async def fetch_active_settings(self) -> list[SettingsRecord]:
        """Return all records with ``is_active`` set, primary records first."""
        ...


@dataclass
class InMemorySettingsStore:
    """Settings store backed by a list of records.

    Useful for tests, scripts and single-process deployments that load
    settings from their own configuration.
    """

    records: list[SettingsRecord] = field(default_factory=list)
    fetch_calls: int = 0

    async def fetch_active_settings(self) -> list[SettingsRecord]:
        """Return copies of active records, primary records first."""
        self.fetch_calls += 1
        active = [dict(r) for r in self.records if r.get("is_active")]
        active.sort(key=lambda r: not r.get("is_primary", False))
        return active

    def upsert(self, record: SettingsRecord) -> None:
        """Insert or replace the record for ``record["provider"]``."""
        provider = record.get("provider")
        self.records = [r for r in self.records if r.get("provider") != provider]
        self.records.append(dict(record))
