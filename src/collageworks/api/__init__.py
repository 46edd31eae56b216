"""Collageworks FastAPI REST API layer.

This package exposes editor sessions, generation runs and stock search over
HTTP.

Modules
-------
main
    FastAPI application with all route handlers and the ``main()`` CLI
    entry point.
models
    Pydantic models for API request and response validation.
sessions
    In-memory store of editor sessions.
"""
