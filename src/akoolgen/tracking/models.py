"""Data model for tracked generation jobs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from akoolgen.core.schemas import JobStatus, validate_action_code


class JobKind(str, Enum):
    """How a job came to exist.

    The kind is decided once, when the job is created, and carried
    unchanged from then on.
    """

    INITIAL = "initial"
    VARIANT = "variant"
    UPSCALE = "upscale"

    @classmethod
    def for_action(cls, action_code: str) -> JobKind:
        """Return the kind of job an action code spawns (``U*`` upscale, ``V*`` variant)."""
        validate_action_code(action_code)
        return cls.UPSCALE if action_code[0] == "U" else cls.VARIANT


@dataclass(frozen=True)
class Job:
    """One generation job as shown to the user.

    Instances are immutable; the tracker replaces a job wholesale when a
    status snapshot is merged into it.

    Attributes:
        id: Provider-assigned id, unique within a tracker.
        kind: Initial, variant or upscale.
        parent_id: Job this one was derived from (variant/upscale only).
        action_code: The button (``U1``..``V4``) that spawned this job.
        status: Last status reported by the provider.
        prompt_text: Prompt, refreshed from provider echoes.
        origin_prompt: Provider's original prompt echo, when it differs.
        aspect_ratio: Provider ``scale``.
        source_image: Source/thumbnail image URL.
        primary_image: Single result image (upscale jobs).
        derived_images: Up to four upscaled variants (initial/variant jobs).
        available_actions: Actions the provider says are still available.
        consumed_actions: Actions already exercised.
        offered_actions: Every action code the provider ever reported for this job.
        created_at: Creation time (UTC).
    """

    id: str
    kind: JobKind
    parent_id: str | None = None
    action_code: str | None = None
    status: JobStatus = JobStatus.QUEUED
    prompt_text: str = ""
    origin_prompt: str | None = None
    aspect_ratio: str = "1:1"
    source_image: str | None = None
    primary_image: str | None = None
    derived_images: tuple[str, ...] = ()
    available_actions: tuple[str, ...] = ()
    consumed_actions: frozenset[str] = frozenset()
    offered_actions: frozenset[str] = frozenset()
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_root(self) -> bool:
        """True for jobs that were not derived from another job."""
        return self.parent_id is None

    @property
    def display_prompt(self) -> str:
        return self.prompt_text or self.origin_prompt or "No prompt"
