"""Cheap syntactic checks for embedded-image photo payloads."""

import logging
from dataclasses import dataclass, field

from gate_entry.domain.errors import InvalidPhotoFormat, PayloadTooLarge

logger = logging.getLogger(__name__)

IMAGE_DATA_PREFIX = "data:image/"
MAX_PHOTO_CHARS = 1_048_576


@dataclass(frozen=True)
class PhotoCheck:
    """Result of guarding a photo payload."""

    attached: bool
    warnings: list[PayloadTooLarge] = field(default_factory=list)


def check_photo(photo: object, max_chars: int = MAX_PHOTO_CHARS) -> PhotoCheck:
    """Validate an optional photo payload without decoding it.

    Raises ``InvalidPhotoFormat`` when a payload is present but is not a
    ``data:image/...`` string. Oversized payloads are accepted with a
    ``PayloadTooLarge`` warning, since the backend enforces the hard limit.
    """
    if photo is None or photo == "":
        return PhotoCheck(attached=False)
    if not isinstance(photo, str) or not photo.startswith(IMAGE_DATA_PREFIX):
        raise InvalidPhotoFormat(
            "Invalid photo format. Please capture the photo again."
        )
    warnings: list[PayloadTooLarge] = []
    if len(photo) > max_chars:
        warning = PayloadTooLarge(length=len(photo), limit=max_chars)
        logger.warning("%s", warning)
        warnings.append(warning)
    return PhotoCheck(attached=True, warnings=warnings)
