"""Provider capability checks.

Every provider runs the same membership checks before touching any key
material; they live here rather than in a common base class.

"""
from typing import AbstractSet
from typing import Any
from typing import Mapping
from typing import Optional
from typing import Tuple
from typing import Type
from typing import Union

from josecrypto import algorithms
from josecrypto import crit
from josecrypto import errors
from josecrypto import header as jose_header
from josecrypto import jwk as jose_jwk


def ensure_algorithm(alg: Optional[algorithms.Algorithm],
                     supported: AbstractSet[algorithms.Algorithm],
                     kind: str = 'algorithm') -> algorithms.Algorithm:
    """Make sure ``alg`` is one of ``supported``.

    :raises errors.UnsupportedAlgorithmError: otherwise

    """
    if alg is None or alg not in supported:
        raise errors.UnsupportedAlgorithmError(kind, alg, supported)
    return alg


def ensure_encryption_method(enc: Optional[algorithms.EncryptionMethod],
                             supported: AbstractSet[algorithms.Algorithm]
                             ) -> algorithms.EncryptionMethod:
    """Make sure ``enc`` is one of ``supported``."""
    return ensure_algorithm(enc, supported, 'JWE encryption method')


def ensure_curve(curve: Optional[algorithms.Curve],
                 supported: AbstractSet[algorithms.Curve]) -> algorithms.Curve:
    """Make sure ``curve`` is one of ``supported``."""
    if curve is None or curve not in supported:
        raise errors.UnsupportedAlgorithmError('elliptic curve', curve, supported)
    return curve


def check_dispatch_table(table: Mapping[Any, Any], supported: AbstractSet[Any],
                         owner: str) -> None:
    """Make sure every supported algorithm has a dispatch table entry.

    Called once at import time by each provider module.

    :raises errors.InternalError: if an entry is missing

    """
    missing = set(supported) - set(table)
    if missing:
        raise errors.InternalError('{0} has no primitive for: {1}'.format(
            owner, ', '.join(sorted(str(alg) for alg in missing))))


def check_header(header: jose_header.Header, supported: AbstractSet[algorithms.Algorithm],
                 critical_params: crit.CriticalHeaderParamsDeferral,
                 kind: str = 'algorithm') -> algorithms.Algorithm:
    """Header checks every provider runs before touching key material.

    :returns: The header algorithm.

    :raises errors.UnsupportedAlgorithmError: if ``alg`` is not supported
    :raises errors.UnsupportedCriticalHeaderError: for unhandled ``crit``

    """
    alg = ensure_algorithm(header.alg, supported, kind)
    critical_params.ensure_header_passes(header)
    return alg


def unwrap_key(key: Any, jwk_cls: Type[jose_jwk.JWK], key_types: Tuple[Type[Any], ...],
               use: jose_jwk.KeyUse) -> Any:
    """Get the `cryptography` key out of ``key``.

    :param key: `cryptography` key, or a JWK of type ``jwk_cls`` whose
        ``use`` permits ``use``.
    :param tuple key_types: Acceptable `cryptography` key types.

    :raises errors.KeyUseError: if the JWK is meant for something else
    :raises errors.MalformedInputError: if the key type is wrong

    """
    if isinstance(key, jose_jwk.JWK):
        if not isinstance(key, jwk_cls):
            raise errors.MalformedInputError('{0} JWK required, got {1}'.format(
                jwk_cls.typ, key.typ))
        key.ensure_use(use)
        key = key.cryptography_key
    if not isinstance(key, key_types):
        raise errors.MalformedInputError('Unsupported key: {0}, must be one of: {1}'.format(
            key.__class__.__name__, ', '.join(cls.__name__ for cls in key_types)))
    return key


def secret_bytes(secret: Union[bytes, str, jose_jwk.OctetSequenceKey],
                 use: jose_jwk.KeyUse) -> bytes:
    """Shared secret as bytes; strings are UTF-8 encoded."""
    if isinstance(secret, str):
        return secret.encode('utf-8')
    return unwrap_key(secret, jose_jwk.OctetSequenceKey, (bytes,), use)
