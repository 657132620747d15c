"""Organizations: owner, admins and lifecycle."""
