"""Workflow automation core plus its CLI, settings and default effect handlers."""
