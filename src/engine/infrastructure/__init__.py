"""Shared infrastructure: settings, logging and database plumbing."""
