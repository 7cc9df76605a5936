"""
Restaurant directory core.

Responsibilities:
- Persist restaurant records in the durable key-value store.
- Mirror full records in the distributed cache for point lookups.
- Coordinate cache-aside reads, write-through and invalidation.
- Serve cuisine/region listings sorted by rating, straight from the store.
"""
