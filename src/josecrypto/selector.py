"""JWK selection from a key set."""
from typing import AbstractSet
from typing import Any
from typing import Iterable
from typing import List
from typing import Optional

from josecrypto import algorithms
from josecrypto import header as jose_header
from josecrypto import jwk as jose_jwk


def _frozen(values: Optional[Iterable[Any]]) -> Optional[AbstractSet[Any]]:
    return None if values is None else frozenset(values)


def _jws_key_types(alg: algorithms.Algorithm) -> AbstractSet[str]:
    if alg in algorithms.HMAC_SHA:
        return {jose_jwk.OctetSequenceKey.typ}
    if alg in algorithms.RSA_SSA:
        return {jose_jwk.RSAKey.typ}
    if alg in algorithms.ECDSA:
        return {jose_jwk.ECKey.typ}
    if alg in algorithms.ED:
        return {jose_jwk.OctetKeyPair.typ}
    return frozenset()


def _jwe_key_types(alg: algorithms.Algorithm) -> AbstractSet[str]:
    if alg in algorithms.RSA_KEY_ENCRYPTION:
        return {jose_jwk.RSAKey.typ}
    if alg in algorithms.ECDH_ES_FAMILY:
        return {jose_jwk.ECKey.typ, jose_jwk.OctetKeyPair.typ}
    if (alg == algorithms.DIR or alg in algorithms.AES_KW or
            alg in algorithms.AES_GCM_KW or alg in algorithms.PBES2):
        return {jose_jwk.OctetSequenceKey.typ}
    return frozenset()


class JWKMatcher:
    """JWK matching criteria.

    Every criterion is either ``None``, matching anything, or a
    collection of acceptable values. A ``None`` member of a collection
    matches keys on which the attribute is not set.

    :ivar key_types: Acceptable ``kty`` values, e.g. ``{'RSA', 'EC'}``.
    :ivar key_uses: Acceptable :class:`~josecrypto.jwk.KeyUse` values.
    :ivar algorithms: Acceptable ``alg`` values.
    :ivar key_ids: Acceptable ``kid`` values.
    :ivar curves: Acceptable :class:`~josecrypto.algorithms.Curve` values.
    :ivar bool private_only: Match only keys with private material.
    :ivar bool public_only: Match only keys without private material.

    """

    def __init__(self, key_types: Optional[Iterable[Optional[str]]] = None,
                 key_uses: Optional[Iterable[Optional[jose_jwk.KeyUse]]] = None,
                 algorithms: Optional[Iterable[Optional[Any]]] = None,
                 key_ids: Optional[Iterable[Optional[str]]] = None,
                 curves: Optional[Iterable[Optional[Any]]] = None,
                 private_only: bool = False, public_only: bool = False) -> None:
        # pylint: disable=redefined-outer-name,too-many-arguments
        self.key_types = _frozen(key_types)
        self.key_uses = _frozen(key_uses)
        self.algorithms = _frozen(algorithms)
        self.key_ids = _frozen(key_ids)
        self.curves = _frozen(curves)
        self.private_only = private_only
        self.public_only = public_only

    def __repr__(self) -> str:
        return ('JWKMatcher(key_types={0!r}, key_uses={1!r}, algorithms={2!r}, '
                'key_ids={3!r}, curves={4!r}, private_only={5!r}, public_only={6!r})'.format(
                    self.key_types, self.key_uses, self.algorithms, self.key_ids,
                    self.curves, self.private_only, self.public_only))

    @staticmethod
    def _accepts(criterion: Optional[AbstractSet[Any]], value: Any) -> bool:
        return criterion is None or value in criterion

    def matches(self, jwk: jose_jwk.JWK) -> bool:
        """Does ``jwk`` satisfy all criteria?"""
        if self.private_only and not jwk.is_private:
            return False
        if self.public_only and jwk.is_private:
            return False
        return (self._accepts(self.key_types, jwk.typ) and
                self._accepts(self.key_uses, jwk.use) and
                self._accepts(self.algorithms, jwk.alg) and
                self._accepts(self.key_ids, jwk.kid) and
                self._accepts(self.curves, jwk.curve))

    @classmethod
    def for_jws_header(cls, header: jose_header.Header) -> 'JWKMatcher':
        """Criteria for keys that could verify a JWS with ``header``."""
        curve = algorithms.Curve.for_jws_algorithm(header.alg)
        return cls(key_types=_jws_key_types(header.alg),
                   key_uses=(jose_jwk.KeyUse.SIGNATURE, None),
                   algorithms=(header.alg, None),
                   key_ids=None if header.kid is None else (header.kid,),
                   curves=None if curve is None else (curve,))

    @classmethod
    def for_jwe_header(cls, header: jose_header.Header) -> 'JWKMatcher':
        """Criteria for keys that could decrypt a JWE with ``header``."""
        return cls(key_types=_jwe_key_types(header.alg),
                   key_uses=(jose_jwk.KeyUse.ENCRYPTION, None),
                   algorithms=(header.alg, None),
                   key_ids=None if header.kid is None else (header.kid,))


class JWKSelector:
    """Selects the keys of a :class:`~josecrypto.jwk.JWKSet` matching a
    :class:`JWKMatcher`."""

    def __init__(self, matcher: JWKMatcher) -> None:
        self.matcher = matcher

    def select(self, jwk_set: Optional[jose_jwk.JWKSet]) -> List[jose_jwk.JWK]:
        """Matching keys, in key set order.

        :returns: Possibly empty list, also for a ``None`` key set.

        """
        if jwk_set is None:
            return []
        return [jwk for jwk in jwk_set.keys if self.matcher.matches(jwk)]
