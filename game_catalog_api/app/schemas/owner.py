"""
Pydantic schemas for game owners.
"""

from pydantic import BaseModel


class OwnerRead(BaseModel):
    """An owner that currently has at least one game in the catalog."""

    id: int
    name: str
