"""State management utilities for the Gradio UI.

This module handles the initialization and teardown of per-session UI
state: the backend client and the job tracker.
"""

import asyncio
import logging

from akoolgen.client import BackendClient
from akoolgen.core.config import AkoolgenConfig, config
from akoolgen.tracking import JobTracker

from .models import UIState

logger = logging.getLogger(__name__)


def initialize_ui_state(state: UIState | None = None, cfg: AkoolgenConfig | None = None) -> UIState:
    """Initialize or ensure UI state is ready.

    Args:
        state: Existing UIState or None
        cfg: Configuration (default: global config)

    Returns:
        Initialized UIState instance
    """
    cfg = cfg or config

    if state is None:
        logger.info("Creating new UIState")
        state = UIState()

    if state.is_initialized():
        return state

    if state.client is None:
        logger.info(f"Initializing BackendClient for {cfg.api_base_url}")
        state.client = BackendClient(cfg=cfg)

    if state.tracker is None:
        state.tracker = JobTracker(state.client, cfg=cfg)

    return state


def reset_tracker(state: UIState, cfg: AkoolgenConfig | None = None) -> UIState:
    """Stop all polling and start over with an empty job list."""
    if state.tracker is not None:
        state.tracker.unregister_all()
    state.tracker = JobTracker(state.client, cfg=cfg or config) if state.client else None
    state.pending_actions.clear()
    return state


def cleanup_ui_state(state: UIState | None) -> None:
    """Clean up UI state resources when a session ends.

    Stops every polling cycle and closes the backend client.

    Args:
        state: UI state to clean up
    """
    if state is None:
        return

    logger.info("Cleaning up UIState resources")

    if state.tracker is not None:
        state.tracker.unregister_all()

    client = state.client
    if client is not None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        # Without a running loop the client is left to garbage collection.
        if loop is not None:
            loop.create_task(client.aclose())

    state.client = None
    state.tracker = None
    state.authenticated = False
    state.pending_actions.clear()
    state.auth_type = None
