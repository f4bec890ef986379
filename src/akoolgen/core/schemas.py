"""Typed views of the provider's job payloads.

The provider answers every job-related call with a loosely typed ``data``
dict.  These frozen dataclasses are the only shape the rest of the
application sees.  Absent or empty fields parse to ``None`` so that the
tracker's merge step can tell "the provider did not say" apart from
"the provider said something".
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from akoolgen.core.errors import ProviderError, ValidationError

ACTION_CODE_PATTERN = re.compile(r"^[UV][1-4]$")


class JobStatus(IntEnum):
    """Provider ``image_status`` values."""

    QUEUED = 1
    PROCESSING = 2
    COMPLETED = 3
    FAILED = 4

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @property
    def is_pending(self) -> bool:
        return self in (JobStatus.QUEUED, JobStatus.PROCESSING)

    @classmethod
    def parse(cls, value: Any) -> JobStatus | None:
        """Return the status for a raw ``image_status`` value, or ``None``."""
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return None


_STATUS_LABELS = {
    JobStatus.QUEUED: "Queueing",
    JobStatus.PROCESSING: "Processing",
    JobStatus.COMPLETED: "Completed",
    JobStatus.FAILED: "Failed",
}


def validate_action_code(action_code: str | None) -> str:
    """Check an action code (``U1``-``U4``, ``V1``-``V4``).

    Raises:
        ValidationError: If the code is missing or malformed.
    """
    if not action_code:
        raise ValidationError("button is required")
    if not ACTION_CODE_PATTERN.match(action_code):
        raise ValidationError(f"Invalid button {action_code!r}. Expected U1-U4 or V1-V4")
    return action_code


def _text(value: Any) -> str | None:
    if isinstance(value, str) and value:
        return value
    return None


def _text_sequence(value: Any) -> tuple[str, ...] | None:
    if not isinstance(value, (list, tuple)):
        return None
    items = tuple(item for item in value if isinstance(item, str) and item)
    return items or None


@dataclass(frozen=True)
class JobHandle:
    """What the provider returns when a job is created.

    Attributes:
        id: Provider-assigned job id (``_id``).
        status: Initial status, ``QUEUED`` when the provider omits it.
        source_image: Echoed source image, if any.
        aspect_ratio: Echoed ``scale``, or the requested/default ratio.
        data: The raw provider payload.
    """

    id: str
    status: JobStatus = JobStatus.QUEUED
    source_image: str | None = None
    aspect_ratio: str = "1:1"
    data: dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, data: Any, aspect_ratio: str = "1:1") -> JobHandle:
        """Parse a create response payload.

        Raises:
            ProviderError: If the payload carries no job id.
        """
        if not isinstance(data, dict) or not _text(data.get("_id")):
            raise ProviderError("Provider response did not include a job id", data=data)
        return cls(
            id=data["_id"],
            status=JobStatus.parse(data.get("image_status")) or JobStatus.QUEUED,
            source_image=_text(data.get("source_image")),
            aspect_ratio=_text(data.get("scale")) or aspect_ratio,
            data=data,
        )


@dataclass(frozen=True)
class JobStatusSnapshot:
    """One status report for a job.

    ``primary_image`` prefers ``image`` and falls back to ``external_img``.
    ``derived_images`` are the provider's ``upscaled_urls``;
    ``available_actions`` / ``consumed_actions`` are ``buttons`` /
    ``used_buttons``.
    """

    status: JobStatus | None = None
    primary_image: str | None = None
    derived_images: tuple[str, ...] | None = None
    available_actions: tuple[str, ...] | None = None
    consumed_actions: tuple[str, ...] | None = None
    source_image: str | None = None
    prompt: str | None = None
    origin_prompt: str | None = None
    aspect_ratio: str | None = None
    data: dict = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, data: Any) -> JobStatusSnapshot:
        if not isinstance(data, dict):
            return cls()
        return cls(
            data=data,
            status=JobStatus.parse(data.get("image_status")),
            primary_image=_text(data.get("image")) or _text(data.get("external_img")),
            derived_images=_text_sequence(data.get("upscaled_urls")),
            available_actions=_text_sequence(data.get("buttons")),
            consumed_actions=_text_sequence(data.get("used_buttons")),
            source_image=_text(data.get("source_image")),
            prompt=_text(data.get("prompt")),
            origin_prompt=_text(data.get("origin_prompt")),
            aspect_ratio=_text(data.get("scale")),
        )
