"""
Infrastructure layer - external service integrations.

- snowflake: Database persistence (real connection or in-memory mock)

These wrappers translate between external formats and our domain models.
"""
