"""
EC key management for ecdhkdf.

Generates EC private keys and loads/stores them so a provisioned key can be
used as one side of an ECDH secret agreement.
"""

import logging
import os
from typing import Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

logger = logging.getLogger(__name__)

DEFAULT_CURVE = "secp256r1"

_CURVES = {
    'SECP256R1': ec.SECP256R1,
    'P256': ec.SECP256R1,
    'PRIME256V1': ec.SECP256R1,
    'SECP384R1': ec.SECP384R1,
    'P384': ec.SECP384R1,
    'SECP521R1': ec.SECP521R1,
    'P521': ec.SECP521R1,
    'SECP256K1': ec.SECP256K1,
}


def get_curve(curve_name: str) -> ec.EllipticCurve:
    """
    Look up an elliptic curve by name.

    Accepts SEC names (secp256r1) and NIST names (P-256), case-insensitive.

    Raises:
        ValueError: If the curve is unknown
    """
    normalized = (curve_name or "").upper().replace('-', '').replace('_', '')
    if normalized not in _CURVES:
        raise ValueError(f"Unsupported curve: {curve_name}")
    return _CURVES[normalized]()


def generate_private_key(curve_name: str = DEFAULT_CURVE) -> ec.EllipticCurvePrivateKey:
    """Generate a new EC private key on the named curve."""
    return ec.generate_private_key(get_curve(curve_name))


def load_private_key(key_file_path: str, password: Optional[bytes] = None) -> ec.EllipticCurvePrivateKey:
    """
    Load an EC private key from a file.

    Args:
        key_file_path: Path to a PEM or DER encoded private key
        password: Password for an encrypted key

    Returns:
        The EC private key

    Raises:
        FileNotFoundError: If the key file doesn't exist
        ValueError: If the key file format is invalid or not an EC key
    """
    if not os.path.exists(key_file_path):
        raise FileNotFoundError(f"Private key file not found: {key_file_path}")

    with open(key_file_path, 'rb') as f:
        key_data = f.read()

    if key_data.lstrip().startswith(b'-----BEGIN'):
        key = serialization.load_pem_private_key(key_data, password=password)
    else:
        key = serialization.load_der_private_key(key_data, password=password)

    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise ValueError(f"Key in {key_file_path} is not an EC private key")
    return key


def create_private_key_file(
    key_file_path: str,
    private_key: Optional[ec.EllipticCurvePrivateKey] = None,
    curve_name: str = DEFAULT_CURVE
) -> ec.EllipticCurvePrivateKey:
    """
    Create a private key file with either a provided key or a generated one.

    Args:
        key_file_path: Path where to save the key file
        private_key: Optional pre-existing key. If None, generates a new one.
        curve_name: Curve for a generated key

    Returns:
        The private key that was saved
    """
    if private_key is None:
        private_key = generate_private_key(curve_name)

    pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    with open(key_file_path, 'wb') as f:
        f.write(pem)

    # Set restrictive permissions (Unix/Linux)
    try:
        os.chmod(key_file_path, 0o600)  # rw-------
    except (OSError, AttributeError):
        logger.warning("Could not set restrictive permissions on %s", key_file_path)

    return private_key


def load_public_key(data: bytes, curve_name: Optional[str] = None) -> ec.EllipticCurvePublicKey:
    """
    Load a peer's EC public key.

    Args:
        data: PEM or DER SubjectPublicKeyInfo, or an X9.62 encoded point
        curve_name: Curve of an encoded point (required for points)

    Returns:
        The EC public key

    Raises:
        ValueError: If the data cannot be parsed as an EC public key
    """
    if data.lstrip().startswith(b'-----BEGIN'):
        key = serialization.load_pem_public_key(data)
    elif data[:1] in (b'\x02', b'\x03', b'\x04'):
        if curve_name is None:
            raise ValueError("curve_name is required to load an encoded point")
        key = ec.EllipticCurvePublicKey.from_encoded_point(get_curve(curve_name), data)
    else:
        key = serialization.load_der_public_key(data)

    if not isinstance(key, ec.EllipticCurvePublicKey):
        raise ValueError("Data does not contain an EC public key")
    return key


def encode_public_key(public_key: ec.EllipticCurvePublicKey) -> bytes:
    """Encode a public key as an uncompressed X9.62 point."""
    return public_key.public_bytes(
        encoding=serialization.Encoding.X962,
        format=serialization.PublicFormat.UncompressedPoint,
    )
