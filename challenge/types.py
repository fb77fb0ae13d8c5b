"""
Type definitions for the weight loss challenge.

TypedDict shapes of plain dict payloads: user documents, storage
stats, auth responses and test data results. Keys of documents are
camelCase, matching the document store layout.
"""

from typing import TypedDict, Optional


class UserDoc(TypedDict, total=False):
    """users/{uid}"""
    uid: str
    email: str
    displayName: str
    role: str  # admin, regular
    createdAt: str
    lastLoginAt: Optional[str]


class DatabaseStatsDict(TypedDict, total=False):
    """Document counts per collection."""
    users: int
    competitions: int
    participants: int
    weigh_ins: int


class AuthSessionDict(TypedDict, total=False):
    """Response from the sign-in and register endpoints."""
    token: str
    persistent: bool
    expiresIn: int
    user: UserDoc


class GenerationResultDict(TypedDict):
    """Result from test data generation."""
    participants: int
    weigh_ins: int
    elapsed: float
