"""Account, moderation-report, and support-inquiry backend."""

__version__ = "0.1.0"
