"""
errors.py

Responsibility: the common base class for failures the action reports by message.

Each module defines its own subclass next to the code that raises it. The CLI
reports any `ActionError` with its own message and anything else as an
unexpected failure.
"""

from __future__ import annotations


class ActionError(RuntimeError):
    """Base class for failures that carry a user-facing message."""
