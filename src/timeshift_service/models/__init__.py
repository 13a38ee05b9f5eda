"""
Data models for the timeshift service.

This module provides data models for:
- State: SessionState, SessionStateMachine
"""

from __future__ import annotations

from timeshift_service.models.state import (
    InvalidStateTransition,
    SessionState,
    SessionStateMachine,
)

__all__ = [
    "InvalidStateTransition",
    "SessionState",
    "SessionStateMachine",
]
