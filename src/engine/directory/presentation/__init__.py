"""Presentation layer for the directory bounded context."""
