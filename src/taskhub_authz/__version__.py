"""Version information for taskhub-authz."""

__version__ = "0.1.0"
