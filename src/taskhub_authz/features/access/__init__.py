"""Access decisions.

- entities/: Decision and Grant
- services/: the access resolver and the identity-aware access service
"""
