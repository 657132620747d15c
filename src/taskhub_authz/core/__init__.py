"""Core building blocks shared by every taskhub-authz feature."""
