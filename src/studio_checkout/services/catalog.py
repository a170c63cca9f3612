"""Photo and album lookups used to validate selections."""

from typing import Protocol
from uuid import UUID

from studio_checkout.domain.catalog import Album, Photo


class CatalogRepository(Protocol):
    """Read-only access to albums and photos."""

    def get_album(self, album_id: UUID) -> Album | None:
        """Return an album by id, if present."""

    def get_photo(self, photo_id: UUID) -> Photo | None:
        """Return a photo by id, if present."""

    def list_album_photos(self, album_id: UUID, photo_ids: list[UUID]) -> list[Photo]:
        """Return the photos among ``photo_ids`` that belong to the album."""
