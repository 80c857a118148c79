"""Shared helpers: logging, console display, HTTP downloads, shell environments."""
