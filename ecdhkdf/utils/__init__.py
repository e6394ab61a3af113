"""
Utility functions and helpers for ecdhkdf.
"""

from .memory import secure_zero, is_zeroed, split_halves, SecretBuffer

__all__ = [
    'secure_zero',
    'is_zeroed',
    'split_halves',
    'SecretBuffer'
]
