"""Shared helpers (diagnostics and logging) used by the engine and the CLI."""
