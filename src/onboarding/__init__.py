"""Audit log query service for the instructor onboarding portal."""

__version__ = "0.1.0"
