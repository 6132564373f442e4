"""
Core shared utilities for the rental backend.

- db: pooled SQLite connections and record helpers
- schema: table and index creation
- errors: APIError hierarchy and Flask error handlers
"""
