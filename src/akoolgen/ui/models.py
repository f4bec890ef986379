"""Data models and constants for the Gradio UI."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class UIState:
    """Session state for the Gradio UI.

    Each browser session gets its own UIState, and with it its own backend
    client (cookie jar) and job tracker.

    Attributes
    ----------
    client : Any | None
        BackendClient instance holding the session cookie
    tracker : Any | None
        JobTracker instance with this session's jobs
    authenticated : bool
        Whether the backend session is logged in
    auth_type : str | None
        "apikey" or "token" once logged in
    pending_actions : dict[str, set[str]]
        Action codes fired per parent job that its last poll did not yet
        report as used
    """

    client: Any | None = None  # BackendClient instance
    tracker: Any | None = None  # JobTracker instance
    authenticated: bool = False
    auth_type: str | None = None
    pending_actions: dict[str, set[str]] = field(default_factory=dict)

    def is_initialized(self) -> bool:
        return self.client is not None and self.tracker is not None

    def __repr__(self) -> str:
        jobs = len(self.tracker.jobs) if self.tracker is not None else 0
        return (
            f"UIState(initialized={self.is_initialized()}, "
            f"authenticated={self.authenticated}, jobs={jobs})"
        )


# Aspect ratio presets offered by the provider ("scale")
ASPECT_RATIOS = {
    "1:1 (Square)": "1:1",
    "4:3 (Landscape)": "4:3",
    "3:4 (Portrait)": "3:4",
    "16:9 (Widescreen)": "16:9",
    "9:16 (Vertical)": "9:16",
    "3:2 (Photo)": "3:2",
    "2:3 (Portrait Photo)": "2:3",
}

AUTH_MODES = {
    "API Key": "apikey",
    "Client ID / Secret": "token",
}

STATUS_COLORS = {
    1: "#facc15",  # Queueing
    2: "#60a5fa",  # Processing
    3: "#4ade80",  # Completed
    4: "#f87171",  # Failed
}

DEFAULT_PROMPT = "Sun Wukong is surrounded by heavenly soldiers and generals"

RETENTION_WARNING = (
    "⚠️ Generated images are valid for 7 days. Please download and save them promptly."
)
