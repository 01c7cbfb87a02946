"""Image acquisition interface."""

import base64
from typing import Protocol


class ImageSource(Protocol):
    """Interface for obtaining a still food photo."""

    async def acquire(self) -> str | None:
        """Return a base64-encoded image, or None if the user cancelled."""


def encode_image(image_bytes: bytes) -> str:
    """Encode raw image bytes as a base64 payload."""
    return base64.b64encode(image_bytes).decode("utf-8")
