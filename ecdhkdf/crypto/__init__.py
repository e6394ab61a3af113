"""
Cryptographic primitives for ecdhkdf.

This module provides:
- Incremental hashing (hash and HMAC)
- Key derivation from ECDH secrets (hash, HMAC, TLS 1.0 PRF)
- ECDH secret agreement and EC key management
"""

from .agreement import AbsorbInto, ReturnOwned, RETURN_OWNED
from .hashing import IncrementalHash, UnsupportedHashAlgorithmError
from .derivation import (
    derive_key_from_hash,
    derive_key_from_hmac,
    derive_key_tls,
    p_hash,
    split_secret,
    KeyDerivationError,
    InvalidSeedLengthError,
    HashExtractionError,
    SecretAgreementError,
)
from .ecdh import EcdhKeyAgreement

__all__ = [
    'AbsorbInto',
    'ReturnOwned',
    'RETURN_OWNED',
    'IncrementalHash',
    'UnsupportedHashAlgorithmError',
    'derive_key_from_hash',
    'derive_key_from_hmac',
    'derive_key_tls',
    'p_hash',
    'split_secret',
    'KeyDerivationError',
    'InvalidSeedLengthError',
    'HashExtractionError',
    'SecretAgreementError',
    'EcdhKeyAgreement',
]
