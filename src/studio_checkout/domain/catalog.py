"""Read-only album and photo records."""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID


@dataclass(frozen=True)
class Album:
    """Album a client selects photos from."""

    id: UUID
    event_id: UUID
    share_token: str | None


@dataclass(frozen=True)
class Photo:
    """Photo row as seen by checkout."""

    id: UUID
    album_id: UUID
    price: Decimal
