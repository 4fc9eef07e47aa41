"""Versions, changelogs and release steps."""
