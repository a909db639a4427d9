"""Artifact sign-off workflow: PRD -> UX -> Architecture -> Epics/Stories -> Readiness."""

__version__ = "1.0.0"
