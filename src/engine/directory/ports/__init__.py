"""Ports (interfaces) for the directory bounded context."""
