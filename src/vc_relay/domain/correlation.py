"""Domain models for request correlation."""

from dataclasses import dataclass, field
from enum import IntEnum


class CorrelationStatus(IntEnum):
    """Progress of a request as reported by VC Client API callbacks."""

    RETRIEVED = 1
    VERIFIED = 2


class CallbackCode:
    """Callback `code` values sent by the VC Client API."""

    REQUEST_RETRIEVED = "request_retrieved"
    PRESENTATION_VERIFIED = "presentation_verified"
    ISSUANCE_SUCCESSFUL = "issuance_successful"


@dataclass(frozen=True)
class CorrelationRecord:
    """Cached state for one in-flight request."""

    id: str
    status: CorrelationStatus
    message: str
    payload: dict[str, object] | None = field(default=None)

    def to_cache(self) -> dict[str, object]:
        """Serialize the record to a JSON-compatible dict."""
        data: dict[str, object] = {
            "id": self.id,
            "status": int(self.status),
            "message": self.message,
        }
        if self.payload is not None:
            data["payload"] = self.payload
        return data

    @classmethod
    def from_cache(cls, data: dict[str, object]) -> "CorrelationRecord":
        """Rebuild a record from its cached dict."""
        payload = data.get("payload")
        return cls(
            id=str(data["id"]),
            status=CorrelationStatus(int(data["status"])),
            message=str(data.get("message", "")),
            payload=payload if isinstance(payload, dict) else None,
        )

    def browser_view(self) -> dict[str, object]:
        """Return the subset of the record exposed to polling browsers."""
        return {"status": int(self.status), "message": self.message}
