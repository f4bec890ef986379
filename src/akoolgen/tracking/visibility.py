"""Read-side rules deciding which jobs and action buttons the UI shows.

Nothing here is stored; everything is computed from a :class:`Job`.
"""

from __future__ import annotations

from dataclasses import dataclass

from akoolgen.core.schemas import JobStatus

from .models import Job, JobKind


@dataclass(frozen=True)
class ActionButton:
    """One variant/upscale control rendered under a job."""

    code: str
    disabled: bool

    @property
    def is_upscale(self) -> bool:
        return self.code.startswith("U")

    @property
    def title(self) -> str:
        if self.disabled:
            return f"{self.code} already used"
        return f"Upscale {self.code}" if self.is_upscale else f"Variant {self.code}"


def has_content(job: Job) -> bool:
    """True once the job's result payload is attached.

    Upscale jobs need their single image; the others need the upscaled
    variant list.
    """
    if job.kind is JobKind.UPSCALE:
        return bool(job.primary_image)
    return bool(job.derived_images)


def is_visible(job: Job) -> bool:
    """Hide jobs reported completed before their result is attached."""
    return not (job.status is JobStatus.COMPLETED and not has_content(job))


def visible_jobs(jobs) -> list[Job]:
    return [job for job in jobs if is_visible(job)]


def shows_actions(job: Job) -> bool:
    return (
        job.status is JobStatus.COMPLETED
        and has_content(job)
        and job.is_root
        and bool(job.available_actions)
    )


def action_buttons(job: Job) -> list[ActionButton]:
    """Buttons to render for *job*, in provider order; used ones disabled."""
    if not shows_actions(job):
        return []
    return [
        ActionButton(code=code, disabled=code in job.consumed_actions)
        for code in job.available_actions
    ]
