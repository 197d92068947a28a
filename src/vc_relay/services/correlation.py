"""Correlation of outbound requests, callbacks and browser polls."""

import logging
import secrets
from dataclasses import dataclass
from uuid import uuid4

from vc_relay.domain.correlation import CorrelationRecord, CorrelationStatus
from vc_relay.services.cache import Cache

_logger = logging.getLogger(__name__)

_KEY_PREFIX = "correlation:"


def _cache_key(key: str) -> str:
    # `state` is caller-controlled and must never reach template keys
    return f"{_KEY_PREFIX}{key}"


def new_correlation_id() -> str:
    """Return a fresh random correlation id."""
    return str(uuid4())


def generate_pin(length: int) -> str | None:
    """Return a zero-padded random pin of exactly `length` digits."""
    if length <= 0:
        return None
    # uniform over [1, 10**length - 1]
    value = 1 + secrets.randbelow(10**length - 1)
    return str(value).zfill(length)


@dataclass
class CorrelationService:
    """Store and consume per-request status written by callbacks."""

    cache: Cache
    ttl_seconds: int = 300

    def create_correlation(self) -> str:
        """Create an id tying a request, its callbacks and polls together."""
        return new_correlation_id()

    def record_retrieved(self, key: str, message: str) -> CorrelationRecord:
        """Mark the request as fetched by the wallet."""
        record = CorrelationRecord(
            id=key, status=CorrelationStatus.RETRIEVED, message=message
        )
        self._write(record)
        return record

    def record_verified(
        self, key: str, message: str, payload: dict[str, object] | None = None
    ) -> CorrelationRecord:
        """Mark the request as completed, keeping the callback payload."""
        record = CorrelationRecord(
            id=key,
            status=CorrelationStatus.VERIFIED,
            message=message,
            payload=payload,
        )
        self._write(record)
        return record

    def get(self, key: str) -> CorrelationRecord | None:
        """Return the current record without consuming it."""
        cached = self.cache.get(_cache_key(key))
        if not isinstance(cached, dict):
            return None
        return CorrelationRecord.from_cache(cached)

    def poll(
        self,
        correlation_id: str,
        request_id: str | None = None,
        *,
        consume: bool = True,
    ) -> CorrelationRecord | None:
        """Return the record for an id, falling back to the request id.

        A hit is removed when `consume` is set so it is delivered once.
        `None` means nothing has arrived yet.
        """
        for key in (correlation_id, request_id):
            if not key:
                continue
            record = self.get(key)
            if record is None:
                continue
            if consume:
                self.cache.remove(_cache_key(key))
            _logger.info(
                "Poll hit: key=%s status=%s consumed=%s",
                key,
                int(record.status),
                consume,
            )
            return record
        return None

    def take(self, correlation_id: str) -> CorrelationRecord | None:
        """Return and remove a record before anything inspects its payload."""
        record = self.get(correlation_id)
        if record is not None:
            self.cache.remove(_cache_key(correlation_id))
        return record

    def _write(self, record: CorrelationRecord) -> None:
        self.cache.set(
            _cache_key(record.id), record.to_cache(), ttl_seconds=self.ttl_seconds
        )
        _logger.info("Correlation %s -> status %s", record.id, int(record.status))
