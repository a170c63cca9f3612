"""Supabase-backed album and photo lookups."""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from supabase import Client

from studio_checkout.domain.catalog import Album, Photo
from studio_checkout.services.catalog import CatalogRepository


@dataclass
class SupabaseCatalogRepository(CatalogRepository):
    """Supabase implementation for catalog reads."""

    client: Client

    def get_album(self, album_id: UUID) -> Album | None:
        """Return an album by id, if present."""
        response = (
            self.client.table("albums")
            .select("id, event_id, share_token")
            .eq("id", str(album_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return Album(
            id=UUID(row["id"]),
            event_id=UUID(row["event_id"]),
            share_token=row.get("share_token"),
        )

    def get_photo(self, photo_id: UUID) -> Photo | None:
        """Return a photo by id, if present."""
        response = (
            self.client.table("photos")
            .select("id, album_id, price")
            .eq("id", str(photo_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _row_to_photo(response.data[0])

    def list_album_photos(self, album_id: UUID, photo_ids: list[UUID]) -> list[Photo]:
        """Return the requested photos that belong to the album."""
        if not photo_ids:
            return []
        response = (
            self.client.table("photos")
            .select("id, album_id, price")
            .eq("album_id", str(album_id))
            .in_("id", [str(photo_id) for photo_id in photo_ids])
            .execute()
        )
        return [_row_to_photo(row) for row in response.data or []]


def _row_to_photo(row: dict[str, object]) -> Photo:
    return Photo(
        id=UUID(str(row["id"])),
        album_id=UUID(str(row["album_id"])),
        price=Decimal(str(row.get("price") or "0")),
    )
