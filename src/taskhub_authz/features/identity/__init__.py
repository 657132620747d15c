"""Identity context: who the caller is.

- entities/: Actor snapshot and the token decoder protocol
- adapters/: JWT decoding with python-jose
- services/: token to Actor resolution
"""
