"""
ECDH secret agreement backed by the cryptography library.

EcdhKeyAgreement holds the local private key, acts as the secret-agreement
provider for the derivation functions, and exposes them bound to that key.
"""

import logging
from typing import Optional

from cryptography.hazmat.primitives.asymmetric import ec

from .agreement import AbsorbInto, ReturnOwned, SecretRequest
from .derivation import (
    derive_key_from_hash,
    derive_key_from_hmac,
    derive_key_tls,
    BytesLike,
)
from .hashing import canonical_hash_name
from .keys import DEFAULT_CURVE, generate_private_key
from ..utils.memory import secure_zero

logger = logging.getLogger(__name__)


class EcdhKeyAgreement:
    """
    One party of an ECDH key agreement.

    Example:
        >>> alice = EcdhKeyAgreement.generate()
        >>> bob = EcdhKeyAgreement.generate()
        >>> alice.derive_key_material(bob.public_key) == bob.derive_key_material(alice.public_key)
        True
    """

    def __init__(self, private_key: ec.EllipticCurvePrivateKey,
                 default_hash_algorithm: str = "SHA256"):
        """
        Initialize with the local private key.

        Args:
            private_key: EC private key used for the exchange
            default_hash_algorithm: Hash used by derive_key_material
        """
        if not isinstance(private_key, ec.EllipticCurvePrivateKey):
            raise TypeError("private_key must be an EC private key")
        self._private_key = private_key
        self.default_hash_algorithm = canonical_hash_name(default_hash_algorithm)

    @classmethod
    def generate(cls, curve_name: str = DEFAULT_CURVE, **kwargs) -> 'EcdhKeyAgreement':
        """Create a key agreement with a freshly generated key."""
        return cls(generate_private_key(curve_name), **kwargs)

    @property
    def public_key(self) -> ec.EllipticCurvePublicKey:
        return self._private_key.public_key()

    @property
    def curve_name(self) -> str:
        return self._private_key.curve.name

    def _exchange(self, peer_public_key: ec.EllipticCurvePublicKey) -> bytearray:
        if not isinstance(peer_public_key, ec.EllipticCurvePublicKey):
            raise TypeError("peer_public_key must be an EC public key")
        if peer_public_key.curve.name != self.curve_name:
            raise ValueError(
                f"Curve mismatch: local key uses {self.curve_name}, "
                f"peer key uses {peer_public_key.curve.name}"
            )
        # exchange() returns immutable bytes; only this copy can be cleared
        return bytearray(self._private_key.exchange(ec.ECDH(), peer_public_key))

    def derive_secret_agreement(self, peer_public_key: ec.EllipticCurvePublicKey,
                                request: SecretRequest) -> Optional[bytearray]:
        """
        Secret-agreement provider for the derivation functions.

        Args:
            peer_public_key: The other party's public key
            request: AbsorbInto(sink) or ReturnOwned()

        Returns:
            None for AbsorbInto, the raw secret for ReturnOwned
        """
        if isinstance(request, AbsorbInto):
            secret = self._exchange(peer_public_key)
            try:
                request.sink.append_data(secret)
            finally:
                secure_zero(secret)
            return None

        if isinstance(request, ReturnOwned):
            return self._exchange(peer_public_key)

        raise TypeError(f"Unknown secret request: {request!r}")

    def derive_raw_secret_agreement(self, peer_public_key: ec.EllipticCurvePublicKey) -> bytearray:
        """
        Get the raw ECDH shared secret.

        The caller owns the returned buffer and is responsible for clearing it.
        """
        return self._exchange(peer_public_key)

    def derive_key_from_hash(self, peer_public_key: ec.EllipticCurvePublicKey,
                             hash_algorithm: str = "SHA256",
                             prepend: BytesLike = b"",
                             append: BytesLike = b"") -> bytes:
        """Derive Hash(prepend || secret || append)."""
        return derive_key_from_hash(
            peer_public_key, hash_algorithm, prepend, append, self.derive_secret_agreement
        )

    def derive_key_from_hmac(self, peer_public_key: ec.EllipticCurvePublicKey,
                             hash_algorithm: str = "SHA256",
                             hmac_key: Optional[BytesLike] = None,
                             prepend: BytesLike = b"",
                             append: BytesLike = b"") -> bytes:
        """Derive HMAC(hmac_key or secret, prepend || secret || append)."""
        return derive_key_from_hmac(
            peer_public_key, hash_algorithm, hmac_key, prepend, append,
            self.derive_secret_agreement
        )

    def derive_key_tls(self, peer_public_key: ec.EllipticCurvePublicKey,
                       prf_label: BytesLike, prf_seed: BytesLike) -> bytes:
        """Derive 48 bytes with the TLS 1.0 PRF."""
        return derive_key_tls(peer_public_key, prf_label, prf_seed, self.derive_secret_agreement)

    def derive_key_material(self, peer_public_key: ec.EllipticCurvePublicKey) -> bytes:
        """Derive a key by hashing the secret with the default hash algorithm."""
        return self.derive_key_from_hash(peer_public_key, self.default_hash_algorithm)
