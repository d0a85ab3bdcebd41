"""Moodscope: emotion-record analysis engine with cached derived views."""

__version__ = "0.1.0"
