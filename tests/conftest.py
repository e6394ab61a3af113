"""
Shared fixtures for ecdhkdf tests.
"""

import pytest

from ecdhkdf.crypto.agreement import AbsorbInto


PEER_KEY = object()


class ProviderFailure(RuntimeError):
    """Raised by a provider configured to fail mid-derivation."""
    pass


class RecordingProvider:
    """
    Secret-agreement provider over a fixed secret.

    Records every request and sink and keeps a reference to every buffer it
    hands out so tests can check that the engine cleared it.
    """

    def __init__(self, secret: bytes, return_on_absorb: bool = False,
                 return_nothing: bool = False, empty_on_absorb: bool = False,
                 fail_after_absorb: bool = False):
        self.secret = bytes(secret)
        self.return_on_absorb = return_on_absorb
        self.return_nothing = return_nothing
        self.empty_on_absorb = empty_on_absorb
        self.fail_after_absorb = fail_after_absorb
        self.requests = []
        self.peers = []
        self.sinks = []
        self.returned = []

    def __call__(self, peer_public_key, request):
        self.peers.append(peer_public_key)
        self.requests.append(request)

        if isinstance(request, AbsorbInto):
            self.sinks.append(request.sink)
            request.sink.append_data(self.secret)
            if self.fail_after_absorb:
                raise ProviderFailure("secret agreement failed")
            if self.empty_on_absorb:
                return b""
            if not self.return_on_absorb:
                return None

        if self.return_nothing:
            return None

        buf = bytearray(self.secret)
        self.returned.append(buf)
        return buf


@pytest.fixture
def peer_key():
    return PEER_KEY


@pytest.fixture
def make_provider():
    return RecordingProvider


@pytest.fixture
def secret32() -> bytes:
    return bytes(range(1, 33))
