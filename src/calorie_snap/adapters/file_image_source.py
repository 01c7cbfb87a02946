"""Image source that reads a photo from the local filesystem."""

import asyncio
from dataclasses import dataclass
from pathlib import Path

from calorie_snap.domain.errors import AcquisitionError, AcquisitionErrorKind
from calorie_snap.services.acquisition import ImageSource, encode_image


@dataclass
class FileImageSource(ImageSource):
    """Upload fallback: reads a user-selected image file."""

    path: Path | None

    async def acquire(self) -> str | None:
        """Read the selected file; no selection means the user cancelled."""
        if self.path is None:
            return None
        try:
            data = await asyncio.to_thread(self.path.read_bytes)
        except FileNotFoundError as exc:
            raise AcquisitionError(
                AcquisitionErrorKind.NOT_FOUND, "That photo could not be found."
            ) from exc
        except PermissionError as exc:
            raise AcquisitionError(
                AcquisitionErrorKind.PERMISSION_DENIED,
                "Permission to read that photo was denied.",
            ) from exc
        except IsADirectoryError as exc:
            raise AcquisitionError(
                AcquisitionErrorKind.UNSUPPORTED, "Please choose an image file."
            ) from exc
        except OSError as exc:
            raise AcquisitionError(
                AcquisitionErrorKind.BUSY, "That photo could not be read right now."
            ) from exc
        if not data:
            raise AcquisitionError(
                AcquisitionErrorKind.UNKNOWN, "That photo file is empty."
            )
        return encode_image(data)
