"""Visita360 — field sales visit tracking with follow-up reminders."""

__version__ = "1.0.0"
