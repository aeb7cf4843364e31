"""TriFocus: one backlog for three jobs, ordered by urgency, importance and ease."""

__version__ = "0.1.0"
