"""
Key derivation from ECDH secret agreements.

Implements the three derivation schemes applied to a raw ECDH shared secret:

- Hash:    Hash(prepend || secret || append)
- HMAC:    HMAC(key, prepend || secret || append), where key is either
           supplied by the caller or is the secret itself
- TLS PRF: the TLS 1.0 PRF (RFC 4346, section 5) producing 48 bytes

The raw secret comes from a secret-agreement provider (see agreement.py).
Wherever a hash can absorb the secret directly it is streamed into the hash
and never returned. Where the secret has to be handled as bytes, this module
owns it and zeros it before returning, on success and on error.
"""

import logging
from typing import Any, Optional, Tuple, Union

from .agreement import AbsorbInto, RETURN_OWNED, SecretAgreementProvider
from .hashing import IncrementalHash, canonical_hash_name
from ..utils.memory import SecretBuffer, secure_zero, split_halves

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]


class KeyDerivationError(Exception):
    """Raised when a cryptographic operation fails during key derivation."""
    pass


class InvalidSeedLengthError(KeyDerivationError):
    """Raised when the TLS PRF seed is not exactly 64 bytes."""
    pass


class HashExtractionError(KeyDerivationError):
    """Raised when a hash extraction does not produce the expected digest size."""
    pass


class SecretAgreementError(KeyDerivationError):
    """Raised when a secret-agreement provider breaks its calling convention."""
    pass


# TLS 1.0 constants (RFC 4346): client random || server random
TLS_PRF_SEED_SIZE = 64
TLS_PRF_OUTPUT_SIZE = 48
MD5_SIZE = 16
SHA1_SIZE = 20


def _check_peer(peer_public_key: Any) -> None:
    if peer_public_key is None:
        raise ValueError("Peer public key must not be None")


def _absorb_secret(
    derive_secret_agreement: SecretAgreementProvider,
    peer_public_key: Any,
    sink: IncrementalHash
) -> None:
    """
    Stream the secret into sink; the provider must not return it.

    An empty return is treated like None. Any non-empty return breaks the
    calling convention and is cleared, if mutable, before raising.
    """
    returned = derive_secret_agreement(peer_public_key, AbsorbInto(sink))
    if returned is not None and len(returned) > 0:
        if isinstance(returned, bytearray):
            secure_zero(returned)
        raise SecretAgreementError(
            "Secret agreement provider returned a secret when a hash sink was supplied"
        )


def _take_secret(
    derive_secret_agreement: SecretAgreementProvider,
    peer_public_key: Any
) -> SecretBuffer:
    """Obtain the raw secret; ownership moves to the returned guard."""
    returned = derive_secret_agreement(peer_public_key, RETURN_OWNED)
    if returned is None:
        raise SecretAgreementError("Secret agreement provider did not return a secret")
    return SecretBuffer.adopt(returned)


def derive_key_from_hash(
    peer_public_key: Any,
    hash_algorithm: str,
    prepend: BytesLike,
    append: BytesLike,
    derive_secret_agreement: SecretAgreementProvider
) -> bytes:
    """
    Derive a key as Hash(prepend || secret || append).

    Args:
        peer_public_key: The other party's public key, passed to the provider
        hash_algorithm: Hash algorithm name (e.g. "SHA256")
        prepend: Bytes hashed before the secret
        append: Bytes hashed after the secret
        derive_secret_agreement: Secret-agreement provider

    Returns:
        Digest of hash_algorithm's size

    Raises:
        ValueError: If the peer key is None or the algorithm name is empty
        SecretAgreementError: If the provider returned the secret
    """
    _check_peer(peer_public_key)
    hash_algorithm = canonical_hash_name(hash_algorithm)
    logger.debug("Deriving key from %s hash", hash_algorithm)

    with IncrementalHash.create_hash(hash_algorithm) as hasher:
        hasher.append_data(prepend)
        _absorb_secret(derive_secret_agreement, peer_public_key, hasher)
        hasher.append_data(append)
        return hasher.get_hash_and_reset()


def derive_key_from_hmac(
    peer_public_key: Any,
    hash_algorithm: str,
    hmac_key: Optional[BytesLike],
    prepend: BytesLike,
    append: BytesLike,
    derive_secret_agreement: SecretAgreementProvider
) -> bytes:
    """
    Derive a key as HMAC(key, prepend || secret || append).

    With an hmac_key the secret is streamed into the HMAC and hmac_key is
    left untouched. Without one the secret is fetched, used as both the
    HMAC key and the payload, and zeroed before returning.

    Args:
        peer_public_key: The other party's public key, passed to the provider
        hash_algorithm: Hash algorithm name (e.g. "SHA256")
        hmac_key: Caller-owned HMAC key, or None to key with the secret
        prepend: Bytes absorbed before the secret
        append: Bytes absorbed after the secret
        derive_secret_agreement: Secret-agreement provider

    Returns:
        HMAC digest of hash_algorithm's size
    """
    _check_peer(peer_public_key)
    hash_algorithm = canonical_hash_name(hash_algorithm)

    if hmac_key is not None:
        if not isinstance(hmac_key, (bytes, bytearray, memoryview)):
            raise ValueError("HMAC key must be bytes-like")
        logger.debug("Deriving key from %s HMAC with explicit key", hash_algorithm)

        with IncrementalHash.create_hmac(hash_algorithm, hmac_key) as hasher:
            hasher.append_data(prepend)
            _absorb_secret(derive_secret_agreement, peer_public_key, hasher)
            hasher.append_data(append)
            return hasher.get_hash_and_reset()

    logger.debug("Deriving key from %s HMAC keyed with the secret", hash_algorithm)
    with _take_secret(derive_secret_agreement, peer_public_key) as secret:
        key = secret.view()
        with IncrementalHash.create_hmac(hash_algorithm, key) as hasher:
            hasher.append_data(prepend)
            hasher.append_data(key)
            hasher.append_data(append)
            return hasher.get_hash_and_reset()


def split_secret(secret: BytesLike) -> Tuple[memoryview, memoryview]:
    """
    Split a secret into the two TLS PRF halves S1 and S2.

    Each half is ceil(len / 2) bytes. For an odd-length secret the last
    byte of S1 is the first byte of S2. Both halves are views, not copies.

    Args:
        secret: Raw secret

    Returns:
        Tuple of (S1, S2)
    """
    view = memoryview(secret)
    (first, first_len), (second, second_len) = split_halves(len(view))
    return view[first:first + first_len], view[second:second + second_len]


def _extract(hasher: IncrementalHash, destination: bytearray, expected_size: int) -> None:
    written_ok, written = hasher.try_get_hash_and_reset(destination)
    if not written_ok or written != expected_size:
        raise HashExtractionError(
            f"{hasher.algorithm_name} extraction produced {written} bytes, expected {expected_size}"
        )


def p_hash(
    hash_algorithm: str,
    secret: BytesLike,
    label: BytesLike,
    seed: BytesLike,
    hash_output_size: int,
    destination: Union[bytearray, memoryview]
) -> None:
    """
    Fill destination with the RFC 4346 P_hash expansion.

        P_hash(secret, label + seed) = HMAC(secret, A(1) + label + seed) +
                                       HMAC(secret, A(2) + label + seed) + ...
        A(0) = label + seed
        A(i) = HMAC(secret, A(i-1))

    Args:
        hash_algorithm: HMAC hash algorithm name
        secret: HMAC key
        label: PRF label
        seed: PRF seed
        hash_output_size: Digest size every extraction must produce
        destination: Writable buffer of any length to fill

    Raises:
        HashExtractionError: If an extraction produces a different size
    """
    out = memoryview(destination)
    if out.readonly:
        raise TypeError("Destination buffer must be writable")

    a = bytearray(hash_output_size)
    p = bytearray(hash_output_size)
    p_view = memoryview(p)

    try:
        with IncrementalHash.create_hmac(hash_algorithm, secret) as hasher:
            # A(1)
            hasher.append_data(label)
            hasher.append_data(seed)
            _extract(hasher, a, hash_output_size)

            while True:
                hasher.append_data(a)
                hasher.append_data(label)
                hasher.append_data(seed)
                _extract(hasher, p, hash_output_size)

                length = min(len(p), len(out))
                out[:length] = p_view[:length]
                out = out[length:]

                if len(out) == 0:
                    return

                hasher.append_data(a)
                _extract(hasher, a, hash_output_size)
    finally:
        secure_zero(a)
        secure_zero(p)


def derive_key_tls(
    peer_public_key: Any,
    prf_label: BytesLike,
    prf_seed: BytesLike,
    derive_secret_agreement: SecretAgreementProvider
) -> bytes:
    """
    Derive a 48-byte key with the TLS 1.0 PRF.

        PRF(secret, label, seed) = P_MD5(S1, label + seed) XOR
                                   P_SHA-1(S2, label + seed)

    Args:
        peer_public_key: The other party's public key, passed to the provider
        prf_label: PRF label
        prf_seed: 64-byte seed (client random || server random)
        derive_secret_agreement: Secret-agreement provider

    Returns:
        48-byte derived key

    Raises:
        InvalidSeedLengthError: If prf_seed is not 64 bytes. The provider is
            not called in that case.
    """
    _check_peer(peer_public_key)
    if len(prf_seed) != TLS_PRF_SEED_SIZE:
        raise InvalidSeedLengthError(
            f"TLS PRF requires a {TLS_PRF_SEED_SIZE}-byte seed, got {len(prf_seed)} bytes"
        )
    logger.debug("Deriving %d-byte key with TLS PRF", TLS_PRF_OUTPUT_SIZE)

    result = bytearray(TLS_PRF_OUTPUT_SIZE)
    part2 = bytearray(TLS_PRF_OUTPUT_SIZE)

    with _take_secret(derive_secret_agreement, peer_public_key) as secret:
        try:
            s1, s2 = split_secret(secret.view())
            p_hash('MD5', s1, prf_label, prf_seed, MD5_SIZE, result)
            p_hash('SHA1', s2, prf_label, prf_seed, SHA1_SIZE, part2)

            for i in range(len(result)):
                result[i] ^= part2[i]

            return bytes(result)
        finally:
            secure_zero(part2)
            secure_zero(result)
