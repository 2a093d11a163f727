"""Job store persistence."""

from .job_store import JobStore

__all__ = ["JobStore"]
