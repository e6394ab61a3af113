"""
Incremental hashing for ecdhkdf.

Wraps the hash and HMAC contexts of the cryptography library in a single
stateful object that can absorb data repeatedly and be extracted and reset
many times. Key derivation streams secrets into these objects instead of
materializing them.
"""

from typing import Optional, Tuple, Union

from cryptography.hazmat.primitives import hashes, hmac

BytesLike = Union[bytes, bytearray, memoryview]


class UnsupportedHashAlgorithmError(ValueError):
    """Raised when a hash algorithm name is not recognised."""
    pass


# Canonical names, keyed by the normalised spelling
_HASH_ALGORITHMS = {
    'MD5': ('MD5', hashes.MD5),
    'SHA1': ('SHA1', hashes.SHA1),
    'SHA224': ('SHA224', hashes.SHA224),
    'SHA256': ('SHA256', hashes.SHA256),
    'SHA384': ('SHA384', hashes.SHA384),
    'SHA512': ('SHA512', hashes.SHA512),
    'SHA3224': ('SHA3-224', hashes.SHA3_224),
    'SHA3256': ('SHA3-256', hashes.SHA3_256),
    'SHA3384': ('SHA3-384', hashes.SHA3_384),
    'SHA3512': ('SHA3-512', hashes.SHA3_512),
}


def _normalize(name: str) -> str:
    return name.upper().replace('-', '').replace('_', '')


def canonical_hash_name(name: str) -> str:
    """
    Resolve a hash algorithm name to its canonical spelling.

    Names are case-insensitive and '-' / '_' are ignored, so 'sha-256',
    'SHA_256' and 'SHA256' all resolve to 'SHA256'.

    Args:
        name: Hash algorithm name

    Returns:
        Canonical algorithm name

    Raises:
        ValueError: If name is empty or not a string
        UnsupportedHashAlgorithmError: If name is unknown
    """
    if not isinstance(name, str) or not name:
        raise ValueError("Hash algorithm name must be a non-empty string")
    try:
        return _HASH_ALGORITHMS[_normalize(name)][0]
    except KeyError:
        raise UnsupportedHashAlgorithmError(f"Unsupported hash algorithm: {name}")


def get_hash_algorithm(name: str) -> hashes.HashAlgorithm:
    """Create the cryptography hash algorithm instance for a name."""
    canonical_hash_name(name)
    return _HASH_ALGORITHMS[_normalize(name)][1]()


def supported_hash_algorithms() -> Tuple[str, ...]:
    """Get the canonical names of all supported hash algorithms."""
    return tuple(entry[0] for entry in _HASH_ALGORITHMS.values())


class IncrementalHash:
    """
    Stateful hash or HMAC accumulator.

    Use create_hash() for a plain digest and create_hmac() for a keyed
    one. After every extraction the object is back in its initial state
    (still keyed in HMAC mode), ready to absorb the next message.
    """

    def __init__(self, algorithm_name: str, key: Optional[BytesLike] = None):
        """
        Initialize the accumulator.

        Args:
            algorithm_name: Hash algorithm name
            key: HMAC key, or None for an unkeyed hash. The key is never
                modified and no reference to it is kept.
        """
        self._algorithm_name = canonical_hash_name(algorithm_name)
        algorithm = get_hash_algorithm(self._algorithm_name)

        if key is None:
            self._pristine = hashes.Hash(algorithm)
        else:
            if not isinstance(key, (bytes, bytearray, memoryview)):
                raise TypeError("HMAC key must be bytes-like")
            self._pristine = hmac.HMAC(key, algorithm)

        self._keyed = key is not None
        self._digest_size = algorithm.digest_size
        self._ctx = self._pristine.copy()

    @classmethod
    def create_hash(cls, algorithm_name: str) -> 'IncrementalHash':
        """Create an unkeyed incremental hash."""
        return cls(algorithm_name)

    @classmethod
    def create_hmac(cls, algorithm_name: str, key: BytesLike) -> 'IncrementalHash':
        """Create an incremental HMAC keyed with key."""
        if key is None:
            raise ValueError("HMAC key must not be None")
        return cls(algorithm_name, key)

    @property
    def algorithm_name(self) -> str:
        return self._algorithm_name

    @property
    def digest_size(self) -> int:
        return self._digest_size

    @property
    def is_keyed(self) -> bool:
        return self._keyed

    def _context(self):
        if self._ctx is None:
            raise ValueError("IncrementalHash has been closed")
        return self._ctx

    def append_data(self, data: BytesLike) -> None:
        """
        Absorb data into the running digest.

        Args:
            data: Bytes-like data to absorb
        """
        self._context().update(data)

    def get_hash_and_reset(self) -> bytes:
        """
        Finalize the running digest and reset.

        Returns:
            Digest of everything absorbed since the last reset
        """
        digest = self._context().finalize()
        self._ctx = self._pristine.copy()
        return digest

    def try_get_hash_and_reset(self, destination: Union[bytearray, memoryview]) -> Tuple[bool, int]:
        """
        Finalize into a caller-supplied buffer and reset.

        Args:
            destination: Writable buffer receiving the digest

        Returns:
            Tuple of (success, bytes_written). On failure nothing is
            written and the running state is kept.
        """
        ctx = self._context()
        if len(destination) < self._digest_size:
            return False, 0

        digest = ctx.finalize()
        destination[:len(digest)] = digest
        self._ctx = self._pristine.copy()
        return True, len(digest)

    def close(self) -> None:
        """Release the underlying contexts."""
        self._ctx = None
        self._pristine = None

    def __enter__(self) -> 'IncrementalHash':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
