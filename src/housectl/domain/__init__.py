"""Domain layer — types, rules, errors, and value snapshots.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
