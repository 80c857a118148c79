"""Jinja2 templates rendered by the installer."""
