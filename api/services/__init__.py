"""Service layer for state handling.

Services own the certificate editor's state, keeping routes thin and
focused on HTTP handling.

Layer hierarchy:
    Routes (HTTP) -> Services (state, ingestion) -> Rendering (pure views)

Services should:
- Own every mutation of a page's form state
- Raise domain exceptions for routes to translate

Services should NOT:
- Know about HTTP request/response details
- Build HTML (rendering does that)
"""
