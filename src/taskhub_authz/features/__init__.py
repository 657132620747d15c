"""Feature packages.

Each feature follows the same layout:
- entities/: domain objects and protocols
- services/: business logic
- repositories/ and adapters/: persistence and external integrations
- utils/: feature-local helpers

Feature packages import each other's leaf modules directly.
"""
