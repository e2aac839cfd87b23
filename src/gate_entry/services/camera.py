"""State machine for acquiring a camera and capturing a visitor photo."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from gate_entry.domain.errors import InvalidPhotoFormat
from gate_entry.services.photos import MAX_PHOTO_CHARS, check_photo

logger = logging.getLogger(__name__)


class CaptureState(Enum):
    """Where the capture widget currently is."""

    IDLE = "idle"
    REQUESTING = "requesting"
    STREAMING = "streaming"
    ERROR = "error"
    REVIEWING = "reviewing"


class CaptureFailure(Enum):
    """Why a camera could not be opened."""

    PERMISSION_DENIED = "permission_denied"
    NO_DEVICE = "no_device"
    DEVICE_BUSY = "device_busy"
    CONSTRAINTS_UNSATISFIED = "constraints_unsatisfied"
    UNKNOWN = "unknown"


FAILURE_MESSAGES = {
    CaptureFailure.PERMISSION_DENIED: (
        "Camera permission denied. Please allow camera access in your browser settings."
    ),
    CaptureFailure.NO_DEVICE: (
        "No camera found on this device. Please check your hardware."
    ),
    CaptureFailure.DEVICE_BUSY: (
        "Camera is in use by another app. Please close other apps and try again."
    ),
    CaptureFailure.CONSTRAINTS_UNSATISFIED: (
        "No camera matches the requested settings."
    ),
    CaptureFailure.UNKNOWN: "Camera access failed. Please try again.",
}

_ERROR_NAMES = {
    "NotAllowedError": CaptureFailure.PERMISSION_DENIED,
    "PermissionDeniedError": CaptureFailure.PERMISSION_DENIED,
    "NotFoundError": CaptureFailure.NO_DEVICE,
    "DevicesNotFoundError": CaptureFailure.NO_DEVICE,
    "NotReadableError": CaptureFailure.DEVICE_BUSY,
    "TrackStartError": CaptureFailure.DEVICE_BUSY,
    "OverconstrainedError": CaptureFailure.CONSTRAINTS_UNSATISFIED,
    "ConstraintNotSatisfiedError": CaptureFailure.CONSTRAINTS_UNSATISFIED,
}

# No later attempt can succeed after these.
_FINAL_FAILURES = {CaptureFailure.PERMISSION_DENIED, CaptureFailure.NO_DEVICE}

_REAR_HINTS = ("back", "rear", "environment")
_FRONT_HINTS = ("user", "front", "selfie")


class MediaAccessError(Exception):
    """A media request failed; ``name`` carries the browser error name."""

    def __init__(self, name: str, message: str = "") -> None:
        self.name = name
        super().__init__(message or name)


class CaptureStateError(Exception):
    """An action was requested in a state that does not allow it."""


@dataclass(frozen=True)
class VideoConstraints:
    """Video constraints for one acquisition attempt."""

    facing_mode: str | None = None
    exact_facing: bool = False
    device_id: str | None = None


@dataclass(frozen=True)
class VideoInput:
    """An enumerated video input device."""

    device_id: str
    label: str = ""


class MediaStream(Protocol):
    """An open camera stream."""

    def snapshot(self) -> str:
        """Return the current frame as an image data URL."""

    def stop(self) -> None:
        """Release the camera."""


class MediaDevices(Protocol):
    """Access to the device's cameras."""

    def open(self, constraints: VideoConstraints) -> MediaStream:
        """Open a stream or raise ``MediaAccessError``."""

    def video_inputs(self) -> list[VideoInput]:
        """Return available video inputs or raise ``MediaAccessError``."""


def classify_failure(error_name: str) -> CaptureFailure:
    """Map a browser media error name to a failure reason."""
    return _ERROR_NAMES.get(error_name, CaptureFailure.UNKNOWN)


def preferred_device_id(inputs: list[VideoInput], prefer_rear: bool) -> str | None:
    """Pick the device to try when facing-mode constraints fail."""
    if not inputs:
        return None
    if prefer_rear:
        for device in inputs:
            if _label_matches(device.label, _REAR_HINTS):
                return device.device_id
        for device in inputs:
            if not device.label or not _label_matches(device.label, _FRONT_HINTS):
                return device.device_id
        if len(inputs) > 1:
            return inputs[-1].device_id
    return inputs[0].device_id


def _label_matches(label: str, hints: tuple[str, ...]) -> bool:
    lowered = label.lower()
    return any(hint in lowered for hint in hints)


@dataclass
class CameraCapture:
    """Drive a single photo capture from camera request to confirmed photo."""

    devices: MediaDevices
    prefer_rear: bool = False
    max_photo_chars: int = MAX_PHOTO_CHARS
    state: CaptureState = CaptureState.IDLE
    failure: CaptureFailure | None = None
    photo: str | None = None
    _stream: MediaStream | None = field(default=None, repr=False)

    @property
    def error_message(self) -> str | None:
        """User-facing message for the current failure, if any."""
        if self.failure is None:
            return None
        return FAILURE_MESSAGES[self.failure]

    def start(self) -> CaptureState:
        """Request a camera, falling back through looser constraints."""
        self._require(CaptureState.IDLE, CaptureState.ERROR)
        self.state = CaptureState.REQUESTING
        self.failure = None
        last_failure = CaptureFailure.UNKNOWN
        for constraints in self._attempts():
            try:
                self._stream = self.devices.open(constraints)
            except MediaAccessError as exc:
                last_failure = classify_failure(exc.name)
                logger.info("Camera attempt %s failed: %s", constraints, exc.name)
                if last_failure in _FINAL_FAILURES:
                    break
                continue
            self.state = CaptureState.STREAMING
            return self.state
        self.state = CaptureState.ERROR
        self.failure = last_failure
        logger.warning("Camera unavailable: %s", last_failure.value)
        return self.state

    def capture(self) -> str:
        """Take a snapshot and move to review."""
        self._require(CaptureState.STREAMING)
        stream = self._stream
        if stream is None:
            raise CaptureStateError("No open camera stream")
        self.photo = stream.snapshot()
        self._release()
        self.state = CaptureState.REVIEWING
        return self.photo

    def retake(self) -> CaptureState:
        """Discard the reviewed photo and reopen the camera."""
        self._require(CaptureState.REVIEWING)
        self.photo = None
        self.state = CaptureState.IDLE
        return self.start()

    def confirm(self) -> str:
        """Accept the reviewed photo after the payload guard passes."""
        self._require(CaptureState.REVIEWING)
        photo = self.photo or ""
        if not check_photo(photo, self.max_photo_chars).attached:
            raise InvalidPhotoFormat("No photo was captured")
        self.photo = None
        self.state = CaptureState.IDLE
        return photo

    def cancel(self) -> None:
        """Release the camera and reset."""
        self._release()
        self.photo = None
        self.failure = None
        self.state = CaptureState.IDLE

    def _attempts(self) -> Iterator[VideoConstraints]:
        if self.prefer_rear:
            yield VideoConstraints(facing_mode="environment", exact_facing=True)
        else:
            yield VideoConstraints(facing_mode="user")
        try:
            inputs = self.devices.video_inputs()
        except MediaAccessError as exc:
            logger.info("Device enumeration failed: %s", exc.name)
            inputs = []
        device_id = preferred_device_id(inputs, self.prefer_rear)
        if device_id:
            yield VideoConstraints(device_id=device_id)
        yield VideoConstraints()

    def _release(self) -> None:
        if self._stream is not None:
            self._stream.stop()
            self._stream = None

    def _require(self, *states: CaptureState) -> None:
        if self.state not in states:
            raise CaptureStateError(f"Cannot do that while {self.state.value}")
