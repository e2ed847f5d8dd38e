from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class FeedItem(BaseModel):
    """One normalized RSS entry. Lives for a single aggregation request."""

    model_config = ConfigDict(frozen=True)

    title: str
    link: str
    description: str
    published: datetime
    source: str


class SourcePayload(BaseModel):
    """Body of POST /api/sources/add and /api/sources/remove."""

    url: str
