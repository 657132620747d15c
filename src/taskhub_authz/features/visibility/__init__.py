"""Visibility policy evaluation."""
