"""Tests for akoolgen.ui.state — per-session UI state lifecycle."""

from __future__ import annotations

from akoolgen.client import BackendClient
from akoolgen.core.schemas import JobHandle
from akoolgen.tracking import JobKind, JobTracker
from akoolgen.ui.models import UIState
from akoolgen.ui.state import cleanup_ui_state, initialize_ui_state, reset_tracker


class TestInitializeUIState:
    """initialize_ui_state creates the client and tracker once."""

    def test_creates_new_state(self, test_config):
        state = initialize_ui_state(None, test_config)
        assert isinstance(state.client, BackendClient)
        assert isinstance(state.tracker, JobTracker)
        assert state.is_initialized()

    def test_existing_state_is_reused(self, test_config):
        state = initialize_ui_state(UIState(), test_config)
        client, tracker = state.client, state.tracker
        again = initialize_ui_state(state, test_config)
        assert again is state
        assert again.client is client
        assert again.tracker is tracker

    def test_repr(self, test_config):
        state = initialize_ui_state(None, test_config)
        assert "jobs=0" in repr(state)


class TestResetAndCleanup:
    """reset_tracker and cleanup_ui_state stop polling."""

    def test_reset_tracker_stops_polling(self, test_config, scheduler):
        state = initialize_ui_state(None, test_config)
        state.tracker = JobTracker(state.client, scheduler, cfg=test_config)
        state.tracker.register(JobKind.INITIAL, JobHandle(id="root"))
        state.pending_actions["root"] = {"U1"}

        reset_tracker(state, test_config)

        assert scheduler.active_ids() == []
        assert state.tracker.jobs == ()
        assert state.pending_actions == {}

    def test_cleanup_clears_state(self, test_config, scheduler):
        state = initialize_ui_state(None, test_config)
        state.tracker = JobTracker(state.client, scheduler, cfg=test_config)
        state.tracker.register(JobKind.INITIAL, JobHandle(id="root"))
        state.authenticated = True
        state.pending_actions["root"] = {"V2"}

        cleanup_ui_state(state)

        assert scheduler.active_ids() == []
        assert state.client is None
        assert state.tracker is None
        assert not state.authenticated
        assert state.pending_actions == {}

    def test_cleanup_none_is_noop(self):
        cleanup_ui_state(None)
