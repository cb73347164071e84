"""
Core business logic for workout tracking.

This module is framework-agnostic - it doesn't import FastAPI, Snowflake,
or any infrastructure concerns. This separation means we can test the
aggregation logic in isolation and swap frameworks if needed.
"""
