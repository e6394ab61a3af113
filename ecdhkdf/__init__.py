"""
ecdhkdf: key derivation from ECDH shared secrets.

Turns a raw elliptic-curve Diffie-Hellman shared secret into a symmetric key
using a plain hash, an HMAC, or the TLS 1.0 PRF, while keeping the raw secret
out of reach of the caller wherever possible.

Basic Usage:
    >>> from ecdhkdf import EcdhKeyAgreement
    >>>
    >>> alice = EcdhKeyAgreement.generate("secp256r1")
    >>> bob = EcdhKeyAgreement.generate("secp256r1")
    >>>
    >>> key = alice.derive_key_from_hmac(bob.public_key, "SHA256", prepend=b"ctx")
    >>> key == bob.derive_key_from_hmac(alice.public_key, "SHA256", prepend=b"ctx")
    True
"""

__version__ = "1.0.0"

from .crypto.agreement import AbsorbInto, ReturnOwned, RETURN_OWNED
from .crypto.hashing import IncrementalHash, UnsupportedHashAlgorithmError
from .crypto.derivation import (
    derive_key_from_hash,
    derive_key_from_hmac,
    derive_key_tls,
    p_hash,
    split_secret,
    KeyDerivationError,
    InvalidSeedLengthError,
    HashExtractionError,
    SecretAgreementError,
    TLS_PRF_OUTPUT_SIZE,
    TLS_PRF_SEED_SIZE,
)
from .crypto.ecdh import EcdhKeyAgreement
from .crypto.keys import generate_private_key, load_private_key, load_public_key
from .config import KeyAgreementConfig, ConfigError
from .utils.memory import SecretBuffer, secure_zero


def create_key_agreement(config_dir: str = None) -> EcdhKeyAgreement:
    """
    Create a key agreement from the provisioned private key.

    Args:
        config_dir: Configuration directory (see KeyAgreementConfig)

    Returns:
        EcdhKeyAgreement bound to the configured key
    """
    return KeyAgreementConfig(config_dir).create_key_agreement()


__all__ = [
    '__version__',

    # High-level interface
    'EcdhKeyAgreement',
    'create_key_agreement',
    'KeyAgreementConfig',
    'ConfigError',

    # Derivation engine
    'derive_key_from_hash',
    'derive_key_from_hmac',
    'derive_key_tls',
    'p_hash',
    'split_secret',
    'TLS_PRF_OUTPUT_SIZE',
    'TLS_PRF_SEED_SIZE',

    # Secret agreement requests
    'AbsorbInto',
    'ReturnOwned',
    'RETURN_OWNED',

    # Primitives
    'IncrementalHash',
    'SecretBuffer',
    'secure_zero',
    'generate_private_key',
    'load_private_key',
    'load_public_key',

    # Errors
    'KeyDerivationError',
    'InvalidSeedLengthError',
    'HashExtractionError',
    'SecretAgreementError',
    'UnsupportedHashAlgorithmError',
]
