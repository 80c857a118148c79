"""Packaged data files (default site settings)."""
