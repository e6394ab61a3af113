"""
Secret agreement requests.

A secret-agreement provider is any callable

    provider(peer_public_key, request) -> Optional[bytearray]

where request says what to do with the raw shared secret:

- AbsorbInto(sink): stream the secret into sink and return None.
- ReturnOwned(): return the secret; the caller now owns and clears it.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from .hashing import IncrementalHash


@dataclass(frozen=True)
class AbsorbInto:
    """Request that the secret be absorbed into sink."""
    sink: IncrementalHash


@dataclass(frozen=True)
class ReturnOwned:
    """Request that the secret be returned to the caller."""
    pass


RETURN_OWNED = ReturnOwned()

SecretRequest = Union[AbsorbInto, ReturnOwned]
SecretAgreementProvider = Callable[[Any, SecretRequest], Optional[bytearray]]
