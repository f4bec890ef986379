"""HTML and choice-list rendering of tracked jobs for the Gradio UI."""

from html import escape

from akoolgen.core.schemas import JobStatus
from akoolgen.tracking import Job, JobKind
from akoolgen.tracking.visibility import action_buttons, has_content, visible_jobs

from .models import STATUS_COLORS

EMPTY_GALLERY_HTML = (
    '<div style="text-align:center;padding:48px;color:#9ca3af">'
    "<p>No images generated yet. Create your first image above!</p></div>"
)

_TILE = (
    "background:#1f2937;border-radius:8px;overflow:hidden;aspect-ratio:1;"
    "display:flex;align-items:center;justify-content:center;"
)


def _tile(content: str, link: str | None = None) -> str:
    if link:
        content = (
            f'<a href="{escape(link)}" target="_blank" title="Click to open in new tab">'
            f"{content}</a>"
        )
    return f'<div style="{_TILE}">{content}</div>'


def _img(url: str, alt: str) -> str:
    return (
        f'<img src="{escape(url)}" alt="{escape(alt)}" '
        'style="width:100%;height:100%;object-fit:contain"/>'
    )


def _placeholder(job: Job, idle_text: str = "Loading...") -> str:
    if job.status is JobStatus.FAILED:
        return '<span style="color:#f87171;font-size:12px">Failed</span>'
    if job.status.is_pending:
        return '<span style="color:#6b7280;font-size:12px">Processing...</span>'
    return f'<span style="color:#6b7280;font-size:12px">{escape(idle_text)}</span>'


def _render_images(job: Job) -> str:
    completed = job.status is JobStatus.COMPLETED

    if job.kind is JobKind.UPSCALE:
        if completed and job.primary_image:
            tile = _tile(_img(job.primary_image, job.display_prompt), link=job.primary_image)
        else:
            tile = _tile(_placeholder(job))
        return f'<div style="width:160px;margin:0 auto 12px">{tile}</div>'

    if job.status is JobStatus.FAILED:
        tiles = [_tile(_placeholder(job))]
    elif job.source_image:
        tiles = [_tile(_img(job.source_image, "Thumbnail"))]
    else:
        tiles = [_tile(_placeholder(job, "Thumbnail"))]

    for index in range(4):
        url = job.derived_images[index] if index < len(job.derived_images) else None
        if url and completed:
            tiles.append(_tile(_img(url, f"Upscaled {index + 1}"), link=url))
        else:
            tiles.append(_tile(_placeholder(job)))
    return (
        '<div style="display:grid;grid-template-columns:repeat(5,1fr);gap:8px;'
        f'margin-bottom:12px">{"".join(tiles)}</div>'
    )


def _render_actions(job: Job) -> str:
    buttons = []
    for button in action_buttons(job):
        if button.disabled:
            style = "background:#374151;color:#6b7280;opacity:0.6"
            label = f"{button.code} ✓"
        elif button.is_upscale:
            style = "background:#9333ea;color:#fff"
            label = button.code
        else:
            style = "background:#2563eb;color:#fff"
            label = button.code
        buttons.append(
            f'<span title="{escape(button.title)}" style="{style};font-size:12px;'
            f'padding:6px 8px;border-radius:4px">{escape(label)}</span>'
        )
    if not buttons:
        return ""
    return f'<div style="display:flex;flex-wrap:wrap;gap:8px">{"".join(buttons)}</div>'


def render_job_card(job: Job) -> str:
    color = STATUS_COLORS.get(int(job.status), "#9ca3af")
    badge = ""
    if job.parent_id is not None:
        badge = (
            f'<span style="font-size:12px;color:#6b7280">Variant ({escape(job.action_code or "")})</span>'
        )
    return (
        '<div style="background:#111827;border:1px solid #1f2937;border-radius:8px;'
        'padding:16px;margin-bottom:24px">'
        '<div style="display:flex;justify-content:space-between;margin-bottom:12px">'
        f'<span style="font-size:14px;color:{color}">{job.status.label}</span>{badge}</div>'
        f"{_render_images(job)}"
        f'<p style="font-size:14px;color:#d1d5db;margin-bottom:12px">{escape(job.display_prompt)}</p>'
        f'<p style="font-size:12px;color:#6b7280;margin-bottom:12px">Scale: {escape(job.aspect_ratio)}'
        f" &middot; ID: {escape(job.id)}</p>"
        f"{_render_actions(job)}"
        "</div>"
    )


def render_gallery(jobs) -> str:
    """Render every visible job, newest first."""
    shown = visible_jobs(jobs)
    if not shown:
        return EMPTY_GALLERY_HTML
    return "".join(render_job_card(job) for job in shown)


def action_choices(jobs, pending: dict[str, set[str]] | None = None) -> list[tuple[str, str]]:
    """Dropdown choices for every action that can still be run.

    Values are ``"<job id>:<action code>"``.  Used actions are left out, as
    are codes in *pending* (fired from this session, not yet reported used).
    """
    pending = pending or {}
    choices = []
    for job in visible_jobs(jobs):
        prompt = job.display_prompt
        if len(prompt) > 40:
            prompt = prompt[:37] + "..."
        for button in action_buttons(job):
            if not button.disabled and button.code not in pending.get(job.id, ()):
                choices.append((f"{button.title} · {prompt}", f"{job.id}:{button.code}"))
    return choices


def parse_action_choice(value: str | None) -> tuple[str, str] | None:
    """Split an action dropdown value back into ``(job_id, action_code)``."""
    if not value or ":" not in value:
        return None
    job_id, _, code = value.rpartition(":")
    return job_id, code


def download_choices(jobs) -> list[tuple[str, str]]:
    """Dropdown choices for every finished result image."""
    choices = []
    for job in visible_jobs(jobs):
        if job.status is not JobStatus.COMPLETED or not has_content(job):
            continue
        if job.kind is JobKind.UPSCALE:
            choices.append((f"{job.id} · {job.action_code or 'upscale'}", job.primary_image))
        else:
            for index, url in enumerate(job.derived_images, start=1):
                choices.append((f"{job.id} · image {index}", url))
    return choices
