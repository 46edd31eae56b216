"""Gradio user interface for Collageworks."""
