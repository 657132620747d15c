"""Membership resolution over the entity graph."""
