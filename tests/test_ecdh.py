"""
Integration tests for ECDH key agreement.

Both parties of an exchange must derive the same keys through every scheme.
"""

import hashlib
import hmac

import pytest
from cryptography.hazmat.primitives.asymmetric import ec, ed25519

from ecdhkdf import EcdhKeyAgreement, KeyAgreementConfig, create_key_agreement
from ecdhkdf.crypto.agreement import AbsorbInto, RETURN_OWNED
from ecdhkdf.crypto.hashing import IncrementalHash
from ecdhkdf.crypto.derivation import InvalidSeedLengthError
from ecdhkdf.utils.memory import is_zeroed


@pytest.fixture(params=["secp256r1", "secp384r1", "secp521r1"])
def parties(request):
    return EcdhKeyAgreement.generate(request.param), EcdhKeyAgreement.generate(request.param)


class TestAgreement:
    """Test that both parties agree."""

    def test_raw_secret_agreement(self, parties):
        """Test that both parties compute the same raw secret."""
        alice, bob = parties
        secret_a = alice.derive_raw_secret_agreement(bob.public_key)
        secret_b = bob.derive_raw_secret_agreement(alice.public_key)
        assert isinstance(secret_a, bytearray)
        assert secret_a == secret_b

    def test_hash_derivation(self, parties):
        """Test hash derivation agreement and value."""
        alice, bob = parties
        key_a = alice.derive_key_from_hash(bob.public_key, "SHA256", b"pre", b"post")
        key_b = bob.derive_key_from_hash(alice.public_key, "SHA256", b"pre", b"post")
        assert key_a == key_b

        raw = alice.derive_raw_secret_agreement(bob.public_key)
        assert key_a == hashlib.sha256(b"pre" + bytes(raw) + b"post").digest()

    def test_hmac_derivation_both_modes(self, parties):
        """Test HMAC derivation in explicit and self-keyed modes."""
        alice, bob = parties
        raw = bytes(alice.derive_raw_secret_agreement(bob.public_key))

        self_keyed = alice.derive_key_from_hmac(bob.public_key, "SHA384")
        assert self_keyed == bob.derive_key_from_hmac(alice.public_key, "SHA384")
        assert self_keyed == hmac.new(raw, raw, hashlib.sha384).digest()

        explicit = alice.derive_key_from_hmac(bob.public_key, "SHA384", hmac_key=raw)
        assert explicit == self_keyed

    def test_tls_derivation(self, parties):
        """Test TLS PRF agreement and width."""
        alice, bob = parties
        seed = bytes(64)
        key_a = alice.derive_key_tls(bob.public_key, b"master secret", seed)
        key_b = bob.derive_key_tls(alice.public_key, b"master secret", seed)
        assert key_a == key_b
        assert len(key_a) == 48

    def test_tls_seed_length(self, parties):
        """Test TLS seed length enforcement."""
        alice, bob = parties
        with pytest.raises(InvalidSeedLengthError):
            alice.derive_key_tls(bob.public_key, b"label", bytes(32))

    def test_key_material_uses_default_hash(self):
        """Test that key material uses the default hash."""
        alice = EcdhKeyAgreement.generate(default_hash_algorithm="sha-384")
        bob = EcdhKeyAgreement.generate()
        key = alice.derive_key_material(bob.public_key)
        assert len(key) == 48
        assert key == alice.derive_key_from_hash(bob.public_key, "SHA384")

    def test_different_peers_different_keys(self):
        """Test that different peers yield different keys."""
        alice = EcdhKeyAgreement.generate()
        bob = EcdhKeyAgreement.generate()
        carol = EcdhKeyAgreement.generate()
        assert alice.derive_key_material(bob.public_key) != alice.derive_key_material(carol.public_key)


class TestProvider:
    """Test the secret-agreement provider contract."""

    def test_absorb_returns_nothing(self):
        """Test the absorb request streams the secret into the sink."""
        alice = EcdhKeyAgreement.generate()
        bob = EcdhKeyAgreement.generate()

        with IncrementalHash.create_hash("SHA256") as sink:
            assert alice.derive_secret_agreement(bob.public_key, AbsorbInto(sink)) is None
            absorbed = sink.get_hash_and_reset()

        raw = alice.derive_secret_agreement(bob.public_key, RETURN_OWNED)
        assert absorbed == hashlib.sha256(bytes(raw)).digest()

    def test_unknown_request(self):
        """Test that an unknown request type is rejected."""
        alice = EcdhKeyAgreement.generate()
        bob = EcdhKeyAgreement.generate()
        with pytest.raises(TypeError):
            alice.derive_secret_agreement(bob.public_key, "return it")

    def test_curve_mismatch(self):
        """Test that keys on different curves are rejected."""
        alice = EcdhKeyAgreement.generate("secp256r1")
        bob = EcdhKeyAgreement.generate("secp384r1")
        with pytest.raises(ValueError, match="Curve mismatch"):
            alice.derive_key_material(bob.public_key)

    def test_non_ec_peer_key(self):
        """Test that a non-EC peer key is rejected."""
        alice = EcdhKeyAgreement.generate()
        other = ed25519.Ed25519PrivateKey.generate().public_key()
        with pytest.raises(TypeError):
            alice.derive_raw_secret_agreement(other)

    def test_non_ec_private_key(self):
        """Test that a non-EC private key is rejected."""
        with pytest.raises(TypeError):
            EcdhKeyAgreement(ed25519.Ed25519PrivateKey.generate())

    def test_owned_secret_cleared_by_engine(self, monkeypatch):
        """Test that every secret handed out is cleared."""
        alice = EcdhKeyAgreement.generate()
        bob = EcdhKeyAgreement.generate()
        handed_out = []
        original = alice._exchange

        def recording_exchange(peer):
            secret = original(peer)
            handed_out.append(secret)
            return secret

        monkeypatch.setattr(alice, "_exchange", recording_exchange)
        alice.derive_key_tls(bob.public_key, b"label", bytes(64))
        alice.derive_key_from_hmac(bob.public_key, "SHA256")
        alice.derive_key_from_hash(bob.public_key, "SHA256")

        assert len(handed_out) == 3
        assert all(is_zeroed(secret) for secret in handed_out)

    def test_curve_name(self):
        """Test curve name lookup by NIST name."""
        assert EcdhKeyAgreement.generate("P-384").curve_name == ec.SECP384R1.name


class TestPackageFacade:
    """Test the package level helper."""

    def test_create_key_agreement(self, tmp_path):
        """Test building a key agreement from configuration."""
        config = KeyAgreementConfig(str(tmp_path))
        config.create_new_private_key()

        agreement = create_key_agreement(str(tmp_path))
        bob = EcdhKeyAgreement.generate()
        assert agreement.derive_key_material(bob.public_key) == \
            bob.derive_key_material(agreement.public_key)
