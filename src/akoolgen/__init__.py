"""Akool image generation demo - prompt, variant and upscale jobs with live polling."""

__version__ = "0.1.0"
