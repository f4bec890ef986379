"""Job tracker: registry, polling lifecycle and status reconciliation.

The tracker keeps every job created in the session, newest first, and runs
one polling cycle per job.  Each poll merges a provider status snapshot into
the job's record and decides whether the job is done.

"Done" depends on the job's kind because the provider reports
``image_status == 3`` before the result payload is always attached:

- **Upscale** jobs are done once the status is completed, the snapshot has
  a single image and no upscaled-variant list.
- **Initial** and **Variant** jobs are done once the status is completed
  and the snapshot carries the upscaled-variant list.
- Any job is done when the provider reports failure.

Merge rules
-----------
- Status, prompt and aspect ratio take the snapshot's value whenever the
  snapshot has one.
- Every other field falls back to the stored value when the snapshot omits
  it (or reports it empty); nothing is ever blanked out by a sparse reply.
- Upscale jobs never hold a derived-image list or available actions.
- Derived jobs (those with a parent) never hold available actions, whatever
  the provider reports.
- Consumed actions are restricted to action codes the provider has offered
  for the job at some point.

Merging the same snapshot twice gives the same record as merging it once.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from functools import partial
from typing import Protocol

from akoolgen.core.config import AkoolgenConfig, config
from akoolgen.core.errors import AkoolgenError
from akoolgen.core.schemas import JobHandle, JobStatus, JobStatusSnapshot

from .models import Job, JobKind
from .scheduler import AsyncioPollScheduler, PollScheduler

logger = logging.getLogger(__name__)


class StatusSource(Protocol):
    """Anything that can fetch a status snapshot for a job id."""

    async def get_status(self, job_id: str) -> JobStatusSnapshot: ...


def is_terminal(kind: JobKind, snapshot: JobStatusSnapshot) -> bool:
    """Decide whether polling for a job of *kind* can stop after *snapshot*."""
    if snapshot.status is JobStatus.FAILED:
        return True
    if snapshot.status is not JobStatus.COMPLETED:
        return False
    if kind is JobKind.UPSCALE:
        return not snapshot.derived_images and snapshot.primary_image is not None
    return bool(snapshot.derived_images)


def merge_snapshot(job: Job, snapshot: JobStatusSnapshot) -> Job:
    """Return *job* updated with the contents of *snapshot*."""
    offered = job.offered_actions | frozenset(snapshot.available_actions or ())
    if snapshot.consumed_actions:
        consumed = frozenset(snapshot.consumed_actions) & offered
    else:
        consumed = job.consumed_actions

    if job.kind is JobKind.UPSCALE:
        derived: tuple[str, ...] = ()
        available: tuple[str, ...] = ()
    else:
        derived = snapshot.derived_images or job.derived_images
        if job.is_root:
            available = snapshot.available_actions or job.available_actions
        else:
            available = ()

    return replace(
        job,
        status=snapshot.status or job.status,
        prompt_text=snapshot.prompt or job.prompt_text,
        origin_prompt=snapshot.origin_prompt or job.origin_prompt,
        aspect_ratio=snapshot.aspect_ratio or job.aspect_ratio,
        source_image=snapshot.source_image or job.source_image,
        primary_image=snapshot.primary_image or job.primary_image,
        derived_images=derived,
        available_actions=available,
        consumed_actions=consumed,
        offered_actions=offered,
    )


class JobTracker:
    """In-memory registry of generation jobs and their polling cycles.

    The job list is owned by the tracker: it only changes through
    :meth:`register` and :meth:`poll_once`, and readers get an immutable
    snapshot via :attr:`jobs`.

    Args:
        status_source: Client used to fetch status snapshots.
        scheduler: Polling scheduler (defaults to an asyncio scheduler using
            the configured poll interval).
        cfg: Configuration (defaults to the global instance).
    """

    def __init__(
        self,
        status_source: StatusSource,
        scheduler: PollScheduler | None = None,
        cfg: AkoolgenConfig | None = None,
    ):
        cfg = cfg or config
        self._source = status_source
        self._scheduler = scheduler or AsyncioPollScheduler(cfg.poll_interval)
        self._jobs: list[Job] = []

    @property
    def jobs(self) -> tuple[Job, ...]:
        """All jobs, most recently registered first."""
        return tuple(self._jobs)

    def get(self, job_id: str) -> Job | None:
        return next((job for job in self._jobs if job.id == job_id), None)

    def is_polling(self, job_id: str) -> bool:
        return self._scheduler.is_active(job_id)

    def register(
        self,
        kind: JobKind,
        handle: JobHandle,
        parent_id: str | None = None,
        *,
        action_code: str | None = None,
        prompt_text: str = "",
        origin_prompt: str | None = None,
        aspect_ratio: str | None = None,
        source_image: str | None = None,
    ) -> str:
        """Add a freshly created job to the top of the list and start polling it.

        Args:
            kind: Job kind, fixed for the job's lifetime.
            handle: Provider handle returned by the create call.
            parent_id: Source job for variant/upscale jobs.
            action_code: Button that spawned a variant/upscale job.
            prompt_text: Prompt shown until the provider echoes one.
            origin_prompt: Original prompt of the generation tree.
            aspect_ratio: Aspect ratio (defaults to the handle's echo).
            source_image: Source image (the handle's echo wins when present).

        Returns:
            The job id.

        Raises:
            ValueError: If the id is already registered, or the parent
                reference does not match the kind.
        """
        if self.get(handle.id) is not None:
            raise ValueError(f"Job {handle.id} is already tracked")
        if kind is JobKind.INITIAL and parent_id is not None:
            raise ValueError("Initial jobs cannot have a parent")
        if kind is not JobKind.INITIAL and parent_id is None:
            raise ValueError(f"{kind.value.capitalize()} jobs need a parent job")

        job = Job(
            id=handle.id,
            kind=kind,
            parent_id=parent_id,
            action_code=action_code,
            status=JobStatus.QUEUED,
            prompt_text=prompt_text,
            origin_prompt=origin_prompt,
            aspect_ratio=aspect_ratio or handle.aspect_ratio,
            source_image=handle.source_image or source_image,
        )
        self._jobs.insert(0, job)
        logger.info(f"Tracking {kind.value} job {job.id}" + (f" (from {parent_id})" if parent_id else ""))

        self._scheduler.start(job.id, partial(self.poll_once, job.id))
        return job.id

    async def poll_once(self, job_id: str) -> Job | None:
        """Fetch one status snapshot for *job_id* and merge it.

        Errors while fetching leave the job untouched and keep its polling
        cycle alive; the next tick retries.

        Returns:
            The job after the merge, or ``None`` if the id is unknown.
        """
        if self.get(job_id) is None:
            logger.warning(f"Poll requested for unknown job {job_id}")
            self._scheduler.cancel(job_id)
            return None

        try:
            snapshot = await self._source.get_status(job_id)
        except AkoolgenError as e:
            logger.warning(f"Status poll for {job_id} failed, retrying next tick: {e}")
            return self.get(job_id)

        current = self.get(job_id)
        merged = merge_snapshot(current, snapshot)
        self._replace(merged)

        if is_terminal(current.kind, snapshot):
            if self._scheduler.is_active(job_id):
                logger.info(f"Job {job_id} finished with status {merged.status.label}")
            self._scheduler.cancel(job_id)

        return merged

    def _replace(self, job: Job) -> None:
        for index, existing in enumerate(self._jobs):
            if existing.id == job.id:
                self._jobs[index] = job
                return

    def unregister_all(self) -> None:
        """Cancel every polling cycle.  Jobs stay in the list, inert."""
        active = self._scheduler.active_ids()
        self._scheduler.cancel_all()
        if active:
            logger.info(f"Stopped polling {len(active)} job(s)")
