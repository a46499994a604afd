"""Shared helpers (logging, HTTP) used across depload modules."""
