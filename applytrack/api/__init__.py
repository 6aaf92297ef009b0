"""HTTP API for ApplyTrack."""

from applytrack.api.app import create_app

__all__ = ["create_app"]
