"""Record payment gateway webhook deliveries."""

from dataclasses import dataclass
from typing import Protocol


class WebhookLogRepository(Protocol):
    """Persistence interface for webhook logs."""

    def create_log(
        self,
        event_type: str,
        payload: dict[str, object],
        response: dict[str, object] | None,
        status: str,
    ) -> None:
        """Create a webhook log row."""


@dataclass
class WebhookLogService:
    """Service for recording webhook deliveries."""

    repository: WebhookLogRepository

    def record_success(
        self,
        event_type: str,
        payload: dict[str, object],
        response: dict[str, object] | None = None,
    ) -> None:
        """Persist a successfully handled delivery."""
        self.repository.create_log(event_type, payload, response, "success")

    def record_failure(
        self, event_type: str, payload: dict[str, object], error: str
    ) -> None:
        """Persist a delivery that could not be handled."""
        self.repository.create_log(event_type, payload, {"error": error}, "failed")
