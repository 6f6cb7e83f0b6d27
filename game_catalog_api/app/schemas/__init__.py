"""
Pydantic schema definitions for API payloads.

Request filters and response DTOs are defined here, separate from the
SQLite rows they are built from, to decouple API representation from
persistence.  Field names on the wire are camelCase and fixed; Python
attributes use snake_case with aliases.
"""
