"""Utility functions for optirules."""

from .token_counter import TokenCounter, token_counter

__all__ = [
    "TokenCounter",
    "token_counter",
]
