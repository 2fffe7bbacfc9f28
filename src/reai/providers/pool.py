"""Client pool: bounded LRU of SDK clients keyed by credential and endpoint."""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Any

from reai.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

ClientKey = tuple[str, str, str | None]

DEFAULT_MAX_CLIENTS = 32


@dataclass
class ClientPool:
    """Reuse SDK clients across calls.

    Evicted clients are dropped but not closed, so requests already in
    flight on them complete normally.
    """

    max_size: int = DEFAULT_MAX_CLIENTS
    _clients: OrderedDict[ClientKey, Any] = field(default_factory=OrderedDict)

    def __post_init__(self) -> None:
        """Validate the bound."""
        if self.max_size < 1:
            raise ConfigurationError(f"max_size must be >= 1, got {self.max_size}")

    def get_or_create(self, key: ClientKey, factory: Callable[[], Any]) -> Any:
        """Return the client for *key*, building it with *factory* on a miss."""
        client = self._clients.get(key)
        if client is not None:
            self._clients.move_to_end(key)
            return client
        client = factory()
        self._clients[key] = client
        if len(self._clients) > self.max_size:
            evicted, _ = self._clients.popitem(last=False)
            logger.debug("Evicted %s client from pool", evicted[0])
        return client

    def clear(self) -> None:
        """Forget every pooled client."""
        self._clients.clear()

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, key: object) -> bool:
        return key in self._clients
