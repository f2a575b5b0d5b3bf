"""API Layer - FastAPI routes, auth dependencies, rate limiting and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return the {success, message, data, timestamp} envelope
"""
