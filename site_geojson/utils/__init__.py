"""Path helpers for per-request artifacts."""
