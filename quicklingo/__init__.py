"""QuickLingo: streaming text translation against chat-completion APIs."""

__version__ = "0.3.0"
