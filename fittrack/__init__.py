"""
FitTrack - a fitness tracking API.

This package contains the complete application:
- core: Framework-agnostic workout logic (records, streaks, charts, templates)
- infrastructure: External service integrations (Snowflake persistence)
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
