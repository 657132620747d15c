"""Collaboration services: authorized mutations followed by audit."""
