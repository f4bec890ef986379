"""Event handlers for the Gradio UI.

Handlers dispatch user actions into the backend client and the job
tracker, and render the tracker's job list back into components.  They
never raise into Gradio: every application error is turned into a status
message.
"""

import logging

import gradio as gr

from akoolgen.core.auth import credentials_from_login_payload
from akoolgen.core.config import config
from akoolgen.core.errors import AkoolgenError, AuthenticationExpired, Unauthenticated, user_message
from akoolgen.tracking import JobKind

from .formatting import action_choices, download_choices, parse_action_choice, render_gallery
from .models import ASPECT_RATIOS, AUTH_MODES, UIState
from .state import initialize_ui_state, reset_tracker

logger = logging.getLogger(__name__)


def _views(state: UIState) -> tuple[str, gr.update, gr.update]:
    """Gallery HTML plus refreshed action and download dropdowns."""
    jobs = state.tracker.jobs if state.tracker is not None else ()
    return (
        render_gallery(jobs),
        gr.update(choices=action_choices(jobs, state.pending_actions)),
        gr.update(choices=download_choices(jobs)),
    )


def _panels(authenticated: bool) -> tuple[gr.update, gr.update]:
    """Visibility updates for the (login, demo) panels."""
    return gr.update(visible=not authenticated), gr.update(visible=authenticated)


def _error_text(error: AkoolgenError) -> str:
    return f"❌ {user_message(error)}"


# ---------------------------------------------------------------------------
# Authentication.
# ---------------------------------------------------------------------------


def toggle_auth_fields(auth_label: str) -> tuple[gr.update, gr.update]:
    """Show the API key field or the client id/secret fields."""
    is_api_key = AUTH_MODES.get(auth_label) == "apikey"
    return gr.update(visible=is_api_key), gr.update(visible=not is_api_key)


async def check_auth_handler(state: UIState):
    """Restore the logged-in view if the backend session is still valid."""
    state = initialize_ui_state(state)
    try:
        status = await state.client.check_auth()
    except AkoolgenError as e:
        logger.error(f"Auth check failed: {e}")
        status = {"authenticated": False}

    state.authenticated = bool(status.get("authenticated"))
    state.auth_type = status.get("authType")
    return (*_panels(state.authenticated), state)


async def login_handler(auth_label: str, api_key: str, client_id: str, client_secret: str, state: UIState):
    """Log in with the selected credential mode.

    Returns:
        Tuple of (message, login_panel_update, demo_panel_update, updated_state)
    """
    state = initialize_ui_state(state)
    try:
        credentials = credentials_from_login_payload(
            AUTH_MODES.get(auth_label),
            (api_key or "").strip(),
            (client_id or "").strip(),
            (client_secret or "").strip(),
        )
        result = await state.client.login(credentials)
    except AkoolgenError as e:
        logger.warning(f"Login failed: {e}")
        return (_error_text(e), *_panels(False), state)

    state.authenticated = True
    state.auth_type = result.mode.value
    return (f"✅ {result.message}", *_panels(True), state)


async def logout_handler(state: UIState):
    """Stop polling, drop every job and log the backend session out.

    Returns:
        Tuple of (login_panel_update, demo_panel_update, gallery_html,
        action_dropdown_update, download_dropdown_update, updated_state)
    """
    state = initialize_ui_state(state)
    state = reset_tracker(state)
    try:
        await state.client.logout()
    except AkoolgenError as e:
        logger.error(f"Logout failed: {e}")

    state.authenticated = False
    state.auth_type = None
    return (*_panels(False), *_views(state), state)


def _session_lost(state: UIState, error: AkoolgenError) -> bool:
    """Flag the session as logged out when the backend says so."""
    if isinstance(error, (Unauthenticated, AuthenticationExpired)):
        state.authenticated = False
        return True
    return False


# ---------------------------------------------------------------------------
# Generation.
# ---------------------------------------------------------------------------


def preview_source_image(url: str) -> gr.update:
    url = (url or "").strip()
    return gr.update(value=url or None, visible=bool(url))


def toggle_generate_button(prompt: str) -> gr.update:
    return gr.update(interactive=bool(prompt and prompt.strip()))


async def generate_handler(prompt: str, aspect_label: str, source_image: str, state: UIState):
    """Submit a prompt and start tracking the new job.

    Returns:
        Tuple of (message, prompt_update, source_image_update, gallery_html,
        action_dropdown_update, download_dropdown_update, updated_state)
    """
    state = initialize_ui_state(state)
    aspect_ratio = ASPECT_RATIOS.get(aspect_label, config.default_aspect_ratio)
    source_image = (source_image or "").strip() or None

    try:
        handle = await state.client.create_from_prompt(prompt, aspect_ratio, source_image)
    except AkoolgenError as e:
        logger.warning(f"Generate failed: {e}")
        _session_lost(state, e)
        return (_error_text(e), gr.update(), gr.update(), *_views(state), state)

    state.tracker.register(
        JobKind.INITIAL,
        handle,
        prompt_text=prompt,
        aspect_ratio=aspect_ratio,
        source_image=source_image,
    )
    message = "✅ Image generation started! Polling for status..."
    return (message, gr.update(value=""), gr.update(value=""), *_views(state), state)


async def run_action_handler(selection: str | None, state: UIState):
    """Run a variant/upscale action picked from the action dropdown.

    The new job is placed above every existing one.  The parent job is
    re-polled so its used actions reflect the provider; until a poll reports
    the code as used it stays pending and is re-checked on every timer tick.

    Returns:
        Tuple of (message, gallery_html, action_dropdown_update,
        download_dropdown_update, updated_state)
    """
    state = initialize_ui_state(state)
    parsed = parse_action_choice(selection)
    if parsed is None:
        return ("⚠️ Select an action first", *_views(state), state)

    job_id, action_code = parsed
    parent = state.tracker.get(job_id)
    if parent is None:
        return (f"⚠️ Unknown job {job_id}", *_views(state), state)

    try:
        kind = JobKind.for_action(action_code)
        handle = await state.client.create_from_action(job_id, action_code)
    except AkoolgenError as e:
        logger.warning(f"Action {action_code} on {job_id} failed: {e}")
        _session_lost(state, e)
        return (_error_text(e), *_views(state), state)

    state.tracker.register(
        kind,
        handle,
        parent_id=job_id,
        action_code=action_code,
        prompt_text=parent.prompt_text,
        origin_prompt=parent.origin_prompt or parent.prompt_text,
        aspect_ratio=parent.aspect_ratio,
        source_image=parent.source_image,
    )
    await _recheck_parent(state, job_id, action_code)

    return (f"✅ Variant generation started ({action_code})!", *_views(state), state)


async def _recheck_parent(state: UIState, job_id: str, action_code: str | None = None) -> None:
    """Poll a parent job and settle its pending action codes.

    Codes the poll reports as used stop being pending; *action_code* is
    added when it is still missing from the parent's used actions.
    """
    parent = await state.tracker.poll_once(job_id)
    pending = state.pending_actions.get(job_id, set())
    if action_code is not None:
        pending.add(action_code)
    if parent is not None:
        pending -= parent.consumed_actions
    if pending and parent is not None:
        state.pending_actions[job_id] = pending
    else:
        state.pending_actions.pop(job_id, None)


async def refresh_handler(state: UIState):
    """Re-render the job list; wired to the polling timer.

    Parents with pending actions are polled again first.
    """
    if state is None or state.tracker is None:
        return (render_gallery(()), gr.update(), gr.update())
    for job_id in list(state.pending_actions):
        await _recheck_parent(state, job_id)
    return _views(state)


async def download_handler(url: str | None, state: UIState):
    """Download a result image.

    Returns:
        Tuple of (file_update, message)
    """
    if not url:
        return gr.update(value=None), "⚠️ Select an image first"

    state = initialize_ui_state(state)
    try:
        path = await state.client.download_image(url)
    except AkoolgenError as e:
        logger.warning(f"Download failed, offering direct link: {e}")
        return gr.update(value=None), f"⚠️ Download failed, open the image directly: {url}"
    return gr.update(value=str(path)), f"✅ Saved {path.name}"
