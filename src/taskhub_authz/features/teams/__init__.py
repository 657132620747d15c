"""Teams: lead, members and team visibility."""
