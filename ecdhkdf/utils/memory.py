"""
Secure Memory Operations for ecdhkdf.

Provides utilities for handling raw secret agreements and other short-lived
key material so that it can be cleared deterministically.
"""

import logging
from typing import Tuple, Union

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]


def secure_zero(data: Union[bytearray, memoryview]) -> None:
    """
    Overwrite mutable memory containing sensitive data with zeros.

    Args:
        data: Memory to zero (must be mutable)

    Raises:
        TypeError: If data is not a bytearray or writable memoryview
    """
    if isinstance(data, memoryview):
        if data.readonly:
            raise TypeError("Cannot zero a read-only memoryview")
        data = data.cast('B')
    elif not isinstance(data, bytearray):
        raise TypeError("Data must be bytearray or memoryview")

    for i in range(len(data)):
        data[i] = 0


def is_zeroed(data: BytesLike) -> bool:
    """Check whether every byte of data is zero."""
    return not any(data)


class SecretBuffer:
    """
    Owning guard for a raw secret that zeros itself on exit.

    The guard wraps a bytearray without copying it, so a caller that
    produced the buffer can observe it being cleared. Use it as a context
    manager to make clearing happen on every exit path:

        >>> with SecretBuffer.adopt(secret) as buf:
        ...     use(buf.view())
    """

    def __init__(self, length: int):
        """
        Allocate a zero-filled secret buffer.

        Args:
            length: Size of the buffer in bytes
        """
        if length < 0:
            raise ValueError("Length must be non-negative")
        self._data = bytearray(length)
        self._is_valid = True

    @classmethod
    def adopt(cls, data: BytesLike) -> 'SecretBuffer':
        """
        Take ownership of a secret.

        A bytearray is adopted in place. Immutable input is copied into a
        new bytearray; the original object cannot be cleared.

        Args:
            data: Secret bytes whose ownership moves to the guard

        Returns:
            SecretBuffer owning the secret
        """
        buf = cls.__new__(cls)
        if isinstance(data, bytearray):
            buf._data = data
        else:
            logger.debug("Copying immutable secret of %d bytes into owned buffer", len(data))
            buf._data = bytearray(data)
        buf._is_valid = True
        return buf

    def __len__(self) -> int:
        """Get length of stored data."""
        self._check_valid()
        return len(self._data)

    def __enter__(self) -> 'SecretBuffer':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.clear()

    def __del__(self):
        if getattr(self, '_is_valid', False):
            self.clear()

    def _check_valid(self) -> None:
        if not self._is_valid:
            raise ValueError("SecretBuffer has been cleared")

    def view(self, start: int = 0, length: int = None) -> memoryview:
        """
        Get a zero-copy view over part of the secret.

        Args:
            start: Offset of the first byte
            length: Number of bytes (defaults to the rest of the buffer)

        Returns:
            Writable memoryview aliasing the owned buffer
        """
        self._check_valid()
        if length is None:
            length = len(self._data) - start
        if start < 0 or length < 0 or start + length > len(self._data):
            raise ValueError("View out of range")
        return memoryview(self._data)[start:start + length]

    def clear(self) -> None:
        """Explicitly clear the stored data."""
        if self._is_valid:
            secure_zero(self._data)
            self._is_valid = False

    def is_cleared(self) -> bool:
        """Check if the SecretBuffer has been cleared."""
        return not self._is_valid


def split_halves(length: int) -> Tuple[Tuple[int, int], Tuple[int, int]]:
    """
    Compute the (offset, length) pairs of two overlapping halves.

    Both halves are ceil(length / 2) bytes long. For an odd length the
    middle byte belongs to both.

    Args:
        length: Total length of the buffer being split

    Returns:
        ((first_offset, half_length), (second_offset, half_length))
    """
    half = length // 2
    odd = length & 1
    return (0, half + odd), (half, half + odd)
