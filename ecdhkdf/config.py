"""
Configuration management for ecdhkdf.

Holds the location of the provisioned EC private key and the default hash
algorithm used for plain key material derivation.

This module handles application-level configuration while delegating
cryptographic file operations to the keys module.
"""

import logging
import os
from typing import Optional

from cryptography.hazmat.primitives.asymmetric import ec

from .crypto.ecdh import EcdhKeyAgreement
from .crypto.hashing import canonical_hash_name
from .crypto.keys import DEFAULT_CURVE, create_private_key_file, load_private_key

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "ECDHKDF_CONFIG_DIR"
DEFAULT_HASH_ENV = "ECDHKDF_DEFAULT_HASH"
KEY_FILE_NAME = "private_key.pem"


class ConfigError(Exception):
    """Raised when configuration operations fail."""
    pass


class KeyAgreementConfig:
    """
    Simple configuration manager for ecdhkdf.

    Handles loading the provisioned private key and building key agreements
    from it.
    """

    def __init__(self, config_dir: str = None, default_hash_algorithm: str = None):
        """
        Initialize configuration.

        Args:
            config_dir: Directory for configuration files. Defaults to
                $ECDHKDF_CONFIG_DIR or ~/.ecdhkdf/
            default_hash_algorithm: Hash for derive_key_material. Defaults to
                $ECDHKDF_DEFAULT_HASH or SHA256.
        """
        if config_dir is None:
            config_dir = os.environ.get(CONFIG_DIR_ENV) or os.path.expanduser("~/.ecdhkdf")
        if default_hash_algorithm is None:
            default_hash_algorithm = os.environ.get(DEFAULT_HASH_ENV, "SHA256")

        try:
            self.default_hash_algorithm = canonical_hash_name(default_hash_algorithm)
        except ValueError as e:
            raise ConfigError(f"Invalid default hash algorithm: {e}")

        self.config_dir = config_dir
        self.key_file_path = os.path.join(config_dir, KEY_FILE_NAME)

        # Create config directory if it doesn't exist
        os.makedirs(config_dir, exist_ok=True)

    def get_private_key(self, password: Optional[bytes] = None) -> ec.EllipticCurvePrivateKey:
        """
        Load the provisioned private key.

        Returns:
            The EC private key

        Raises:
            ConfigError: If the private key cannot be loaded
        """
        if not os.path.exists(self.key_file_path):
            raise ConfigError(f"Private key file not found: {self.key_file_path}")

        try:
            return load_private_key(self.key_file_path, password)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid private key format: {e}")
        except OSError as e:
            raise ConfigError(f"Failed to load private key: {e}")

    def set_private_key_from_file(self, source_file: str, password: Optional[bytes] = None) -> None:
        """
        Copy a private key from another file.

        Args:
            source_file: Path to an existing private key file
            password: Password of the source key, if encrypted

        Raises:
            ConfigError: If the source file cannot be read or the key is invalid
        """
        try:
            private_key = load_private_key(source_file, password)
            create_private_key_file(self.key_file_path, private_key)
            logger.info("Private key copied to: %s", self.key_file_path)
        except FileNotFoundError:
            raise ConfigError(f"Source key file not found: {source_file}")
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid source key format: {e}")
        except OSError as e:
            raise ConfigError(f"Failed to copy private key: {e}")

    def create_new_private_key(self, curve_name: str = DEFAULT_CURVE) -> ec.EllipticCurvePrivateKey:
        """
        Generate and save a new private key.

        Returns:
            The generated private key

        Raises:
            ConfigError: If key generation or saving fails
        """
        try:
            private_key = create_private_key_file(self.key_file_path, curve_name=curve_name)
        except (ValueError, OSError) as e:
            raise ConfigError(f"Failed to create new private key: {e}")

        logger.info("Generated new %s private key at: %s", curve_name, self.key_file_path)
        return private_key

    def key_exists(self) -> bool:
        """Check if a private key file exists."""
        return os.path.exists(self.key_file_path)

    def create_key_agreement(self) -> EcdhKeyAgreement:
        """Build a key agreement from the provisioned private key."""
        return EcdhKeyAgreement(self.get_private_key(), self.default_hash_algorithm)
