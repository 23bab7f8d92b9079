"""Shared helpers: text utilities and the error taxonomy."""
