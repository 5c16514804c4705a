"""SonoFlow: live clinical dictation with rule-based transcript enhancement."""

__version__ = "0.1.0"
