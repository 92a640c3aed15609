"""Serving package - HTTP API and in-memory session store."""
