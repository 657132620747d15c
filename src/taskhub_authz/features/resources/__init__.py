"""Collaboration resources: documents, tasks and attachments."""
