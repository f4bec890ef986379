"""Gradio UI for the Akool image generation demo."""

import gradio as gr

from akoolgen.core.config import AkoolgenConfig, config

from .formatting import EMPTY_GALLERY_HTML
from .handlers import (
    check_auth_handler,
    download_handler,
    generate_handler,
    login_handler,
    logout_handler,
    preview_source_image,
    refresh_handler,
    run_action_handler,
    toggle_auth_fields,
    toggle_generate_button,
)
from .models import ASPECT_RATIOS, AUTH_MODES, DEFAULT_PROMPT, RETENTION_WARNING, UIState
from .state import cleanup_ui_state


def create_ui(cfg: AkoolgenConfig | None = None) -> gr.Blocks:
    """Create the Gradio UI.

    Args:
        cfg: Configuration (default: global config)

    Returns:
        Gradio Blocks app
    """
    cfg = cfg or config
    app = gr.Blocks(title="Akool Image Generation")

    with app:
        # Session state - one instance per user, cleaned up when the session ends
        ui_state = gr.State(UIState(), delete_callback=cleanup_ui_state)

        with gr.Column(visible=True) as login_panel:
            login = create_login_panel()

        with gr.Column(visible=False) as demo_panel:
            demo = create_demo_panel(cfg)

        panels = [login_panel, demo_panel]
        views = [demo["gallery"], demo["action_dropdown"], demo["download_dropdown"]]

        app.load(fn=check_auth_handler, inputs=[ui_state], outputs=[*panels, ui_state])

        login["auth_mode"].change(
            fn=toggle_auth_fields,
            inputs=[login["auth_mode"]],
            outputs=[login["api_key_group"], login["client_group"]],
        )
        login["login_button"].click(
            fn=login_handler,
            inputs=[
                login["auth_mode"],
                login["api_key"],
                login["client_id"],
                login["client_secret"],
                ui_state,
            ],
            outputs=[login["message"], *panels, ui_state],
        )

        demo["logout_button"].click(
            fn=logout_handler,
            inputs=[ui_state],
            outputs=[*panels, *views, ui_state],
        )
        demo["prompt"].change(
            fn=toggle_generate_button,
            inputs=[demo["prompt"]],
            outputs=[demo["generate_button"]],
        )
        demo["source_image"].change(
            fn=preview_source_image,
            inputs=[demo["source_image"]],
            outputs=[demo["source_preview"]],
        )
        demo["generate_button"].click(
            fn=generate_handler,
            inputs=[demo["prompt"], demo["aspect_ratio"], demo["source_image"], ui_state],
            outputs=[demo["message"], demo["prompt"], demo["source_image"], *views, ui_state],
        )
        demo["action_button"].click(
            fn=run_action_handler,
            inputs=[demo["action_dropdown"], ui_state],
            outputs=[demo["message"], *views, ui_state],
        )
        demo["download_button"].click(
            fn=download_handler,
            inputs=[demo["download_dropdown"], ui_state],
            outputs=[demo["download_file"], demo["message"]],
        )

        # The tracker polls each job on its own; the timer re-renders and
        # re-checks parents whose fired actions are not yet reported used.
        demo["timer"].tick(fn=refresh_handler, inputs=[ui_state], outputs=views)

    return app


def create_login_panel() -> dict:
    """Create the login form.

    Returns:
        Dictionary of the panel's components
    """
    gr.Markdown(
        """
        # Akool Image Generation
        ### Demo Application
        """
    )
    auth_mode = gr.Radio(
        choices=list(AUTH_MODES),
        value="API Key",
        label="Authentication Method",
    )
    with gr.Group(visible=True) as api_key_group:
        api_key = gr.Textbox(label="API Key", type="password", placeholder="Enter your API key")
    with gr.Group(visible=False) as client_group:
        client_id = gr.Textbox(label="Client ID", placeholder="Enter your client ID")
        client_secret = gr.Textbox(
            label="Client Secret", type="password", placeholder="Enter your client secret"
        )
    message = gr.Markdown()
    login_button = gr.Button("Login", variant="primary")

    return {
        "auth_mode": auth_mode,
        "api_key_group": api_key_group,
        "api_key": api_key,
        "client_group": client_group,
        "client_id": client_id,
        "client_secret": client_secret,
        "message": message,
        "login_button": login_button,
    }


def create_demo_panel(cfg: AkoolgenConfig) -> dict:
    """Create the generation form and the results gallery.

    Args:
        cfg: Configuration

    Returns:
        Dictionary of the panel's components
    """
    with gr.Row():
        gr.Markdown("# Akool Image Generation Demo")
        logout_button = gr.Button("Logout", variant="stop", scale=0)

    gr.Markdown("### Generate Image")
    prompt = gr.Textbox(
        label="Prompt *",
        value=DEFAULT_PROMPT,
        placeholder="Describe the image you want to generate...",
        lines=4,
    )
    default_label = next(
        (label for label, ratio in ASPECT_RATIOS.items() if ratio == cfg.default_aspect_ratio),
        next(iter(ASPECT_RATIOS)),
    )
    aspect_ratio = gr.Dropdown(
        choices=list(ASPECT_RATIOS),
        value=default_label,
        label="Aspect Ratio",
    )
    source_image = gr.Textbox(
        label="Source Image URL (Optional - for Image-to-Image)",
        placeholder="https://example.com/image.png",
    )
    source_preview = gr.Image(label="Preview", visible=False, height=192, interactive=False)
    message = gr.Markdown()
    generate_button = gr.Button("Generate Image", variant="primary")
    gr.Markdown(RETENTION_WARNING)

    gr.Markdown("### Generated Images")
    gallery = gr.HTML(value=EMPTY_GALLERY_HTML)

    with gr.Row():
        action_dropdown = gr.Dropdown(
            choices=[],
            label="Variant / Upscale",
            info="U1-U4 upscale one image, V1-V4 create variations",
            scale=3,
        )
        action_button = gr.Button("Run", scale=1)

    with gr.Row():
        download_dropdown = gr.Dropdown(choices=[], label="Download image", scale=3)
        download_button = gr.Button("Download", scale=1)
    download_file = gr.File(label="Downloaded file", interactive=False)

    timer = gr.Timer(value=cfg.poll_interval)

    return {
        "logout_button": logout_button,
        "prompt": prompt,
        "aspect_ratio": aspect_ratio,
        "source_image": source_image,
        "source_preview": source_preview,
        "message": message,
        "generate_button": generate_button,
        "gallery": gallery,
        "action_dropdown": action_dropdown,
        "action_button": action_button,
        "download_dropdown": download_dropdown,
        "download_button": download_button,
        "download_file": download_file,
        "timer": timer,
    }
