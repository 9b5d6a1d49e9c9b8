"""JOSE utilities."""
from typing import Any
from typing import Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.hazmat.primitives.asymmetric import x25519
from josepy import util as jose_util

OKPPublicKey = Union[ed25519.Ed25519PublicKey, x25519.X25519PublicKey]
OKPPrivateKey = Union[ed25519.Ed25519PrivateKey, x25519.X25519PrivateKey]


class ComparableOKPKey(jose_util.ComparableKey):
    """Wrapper for `cryptography` Ed25519/X25519 keys.

    These keys have no "numbers", so comparison goes through the raw
    key bytes instead.

    """

    def _raw(self) -> bytes:
        if hasattr(self._wrapped, 'private_bytes'):
            return self._wrapped.private_bytes(
                serialization.Encoding.Raw, serialization.PrivateFormat.Raw,
                serialization.NoEncryption())
        return self._wrapped.public_bytes(
            serialization.Encoding.Raw, serialization.PublicFormat.Raw)

    def __eq__(self, other: Any) -> bool:
        if (not isinstance(other, self.__class__) or
                self._wrapped.__class__ is not other._wrapped.__class__):
            return NotImplemented
        return self._raw() == other._raw()

    def __hash__(self) -> int:
        return hash((self.__class__, self._wrapped.__class__, self._raw()))


def unwrap(key: Any) -> Any:
    """Strip a `josepy.util.ComparableKey` wrapper, if any."""
    if isinstance(key, jose_util.ComparableKey):
        return key._wrapped  # pylint: disable=protected-access
    return key
