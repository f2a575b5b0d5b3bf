"""Infrastructure Layer - database sessions and structured logging."""
