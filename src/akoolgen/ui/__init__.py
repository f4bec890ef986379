"""Gradio presentation layer: login form, generation form and job gallery."""
