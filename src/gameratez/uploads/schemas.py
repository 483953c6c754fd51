from __future__ import annotations

from gameratez.schemas import CamelModel


class UploadResponse(CamelModel):
    url: str
