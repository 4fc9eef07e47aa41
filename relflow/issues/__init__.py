"""Issue model and issue tracker adapters."""

from relflow.issues.model import Issue

__all__ = ["Issue"]
