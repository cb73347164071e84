"""Snowflake connection handling and repositories."""
