"""ApplyTrack: job application tracking with a guest mode and an HTTP API."""

__version__ = "0.1.0"
