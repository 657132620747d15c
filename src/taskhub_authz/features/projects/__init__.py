"""Projects: creator, members and visibility."""
