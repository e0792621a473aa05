"""Slack notifier for Japanese earthquake, tsunami and early-warning feeds."""

__version__ = "0.1.0"
