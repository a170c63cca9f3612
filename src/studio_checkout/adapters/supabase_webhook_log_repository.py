"""Supabase repository for webhook logs."""

from dataclasses import dataclass

from supabase import Client

from studio_checkout.services.webhook_log import WebhookLogRepository


@dataclass
class SupabaseWebhookLogRepository(WebhookLogRepository):
    """Supabase-backed webhook log repository."""

    client: Client

    def create_log(
        self,
        event_type: str,
        payload: dict[str, object],
        response: dict[str, object] | None,
        status: str,
    ) -> None:
        """Create a webhook log row."""
        self.client.table("webhook_logs").insert(
            {
                "event_type": event_type,
                "payload": payload,
                "response": response,
                "status": status,
            }
        ).execute()
