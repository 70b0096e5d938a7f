"""
Feature embeddings for ticket packages and free-text queries.

Responsibilities:
- Map catalog records and queries onto the same fixed-length feature layout.
- Degrade to a reduced fallback encoding when a record cannot be encoded.
- Own the per-catalog vector cache used by the ranking engine.
"""
