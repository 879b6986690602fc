"""
Shared, cross-cutting code for the API.

`core/` holds the building blocks every feature uses: the connection pool,
settings, logging setup and the response middleware. Table-specific SQL
lives in the feature package that owns the table (e.g. `users/`).
"""
