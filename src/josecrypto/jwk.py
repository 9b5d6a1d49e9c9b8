"""JSON Web Key."""
import abc
import base64
import binascii
import enum
import json
import logging
from typing import Any
from typing import Dict
from typing import Iterable
from typing import List
from typing import Optional
from typing import Sequence
from typing import Tuple
from typing import Type

import cryptography.exceptions
from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric import x25519
from josepy import errors as jose_errors
from josepy import interfaces
from josepy import json_util
from josepy import util as jose_util

from josecrypto import algorithms
from josecrypto import errors
from josecrypto import util

logger = logging.getLogger(__name__)


class KeyUse(enum.Enum):
    """Intended use of the public key (``use`` member)."""
    SIGNATURE = 'sig'
    ENCRYPTION = 'enc'

    def __str__(self) -> str:
        return self.value


def _decode_member(jobj: Dict[str, Any], name: str, size: Optional[int] = None) -> bytes:
    try:
        value = jobj[name]
    except KeyError:
        raise jose_errors.DeserializationError('Missing key member: {0}'.format(name))
    if not isinstance(value, str):
        raise jose_errors.DeserializationError(
            'Key member {0} must be a string'.format(name))
    return json_util.decode_b64jose(value, size=size)


def _decode_uint(jobj: Dict[str, Any], name: str) -> int:
    """Decode Base64urlUInt."""
    return int.from_bytes(_decode_member(jobj, name), 'big')


def _encode_uint(value: int, size: Optional[int] = None) -> str:
    """Encode Base64urlUInt, optionally left-padded to ``size`` bytes."""
    if size is None:
        size = max((value.bit_length() + 7) // 8, 1)
    return json_util.encode_b64jose(value.to_bytes(size, 'big'))


class JWK(json_util.TypedJSONObjectWithFields):
    """JSON Web Key.

    Common members are fields; key material lives in the ``key`` slot
    of each concrete key type, as a `cryptography` key (or `bytes` for
    symmetric keys).

    :ivar KeyUse use: Intended use, ``None`` if unspecified.
    :ivar tuple key_ops: Permitted key operations.
    :ivar alg: Intended :class:`~josecrypto.algorithms.Algorithm`.
    :ivar str kid: Key ID.
    :ivar tuple x5c: X.509 certificate chain (`cryptography.x509.Certificate`).

    """
    type_field_name = 'kty'
    TYPES: Dict[str, Type['JWK']] = {}
    cryptography_key_types: Tuple[Type[Any], ...] = ()
    """Subclasses should override."""

    required: Sequence[str] = NotImplemented
    """Required members of public key's representation as defined by JWK/JWA."""

    use = json_util.Field('use', omitempty=True)
    key_ops = json_util.Field('key_ops', omitempty=True, default=())
    alg = json_util.Field('alg', omitempty=True)
    kid = json_util.Field('kid', omitempty=True)
    x5u = json_util.Field('x5u', omitempty=True)
    x5c = json_util.Field('x5c', omitempty=True, default=())
    x5t = json_util.Field('x5t', omitempty=True, decoder=json_util.decode_b64jose,
                          encoder=json_util.encode_b64jose)
    x5t_s256 = json_util.Field('x5t#S256', omitempty=True,
                               decoder=json_util.decode_b64jose,
                               encoder=json_util.encode_b64jose)

    _thumbprint_json_dumps_params: Dict[str, Any] = {
        # "no whitespace or line breaks before or after any syntactic
        # elements"
        'indent': None,
        'separators': (',', ':'),
        # "members ordered lexicographically by the Unicode [UNICODE]
        # code points of the member names"
        'sort_keys': True,
    }

    @use.encoder  # type: ignore
    def use(value):  # pylint: disable=missing-docstring,no-self-argument
        return value.value

    @use.decoder  # type: ignore
    def use(value):  # pylint: disable=missing-docstring,no-self-argument
        try:
            return KeyUse(value)
        except ValueError:
            raise jose_errors.DeserializationError(
                'Unknown key use: {0!r}'.format(value))

    @alg.decoder  # type: ignore
    def alg(value):  # pylint: disable=missing-docstring,no-self-argument
        if not isinstance(value, str):
            raise jose_errors.DeserializationError('alg must be a string')
        return algorithms.parse_algorithm(value)

    @key_ops.encoder  # type: ignore
    def key_ops(value):  # pylint: disable=missing-docstring,no-self-argument
        return list(value)

    # x5c does NOT use JOSE Base64 (RFC 7517, 4.7)

    @x5c.encoder  # type: ignore
    def x5c(value):  # pylint: disable=missing-docstring,no-self-argument
        return [base64.b64encode(cert.public_bytes(serialization.Encoding.DER)).decode('ascii')
                for cert in value]

    @x5c.decoder  # type: ignore
    def x5c(value):  # pylint: disable=missing-docstring,no-self-argument
        try:
            return tuple(x509.load_der_x509_certificate(base64.b64decode(cert))
                         for cert in value)
        except (ValueError, TypeError) as error:
            raise jose_errors.DeserializationError(error)

    def thumbprint(self, hash_function=hashes.SHA256) -> bytes:
        """Compute JWK Thumbprint.

        https://tools.ietf.org/html/rfc7638

        :returns bytes:

        """
        digest = hashes.Hash(hash_function())
        digest.update(json.dumps(
            {k: v for k, v in self.to_json().items() if k in self.required},
            **self._thumbprint_json_dumps_params).encode())
        return digest.finalize()

    @property
    def is_private(self) -> bool:
        """Does the key carry private (or secret) material?"""
        return isinstance(self.cryptography_key, self.private_key_types)

    private_key_types: Tuple[Type[Any], ...] = ()

    @property
    def cryptography_key(self) -> Any:
        """The unwrapped `cryptography` key (`bytes` for symmetric keys)."""
        return util.unwrap(self.key)  # pylint: disable=no-member

    @property
    def curve(self) -> Optional[algorithms.Curve]:
        """Curve of the key, for key types that have one."""
        return None

    @abc.abstractmethod
    def public_key(self) -> 'JWK':  # pragma: no cover
        """Generate JWK with public key.

        For symmetric cryptosystems, this would return ``self``.

        """
        raise NotImplementedError()

    def ensure_use(self, use: KeyUse) -> None:
        """Make sure the key may be used for ``use``.

        A key without ``use`` may be used for anything.

        :raises errors.KeyUseError: if the declared use differs

        """
        if self.use is not None and self.use is not use:
            raise errors.KeyUseError('Key {0!r} has use {1}, cannot be used for {2}'.format(
                self.kid, self.use, use))

    @classmethod
    def _load_cryptography_key(cls, data: bytes, password: Optional[bytes] = None) -> Any:
        exceptions = {}

        # private key?
        for loader in (serialization.load_pem_private_key,
                       serialization.load_der_private_key):
            try:
                return loader(data, password)
            except (ValueError, TypeError,
                    cryptography.exceptions.UnsupportedAlgorithm) as error:
                exceptions[loader] = error

        # public key?
        for loader in (serialization.load_pem_public_key,
                       serialization.load_der_public_key):
            try:
                return loader(data)
            except (ValueError,
                    cryptography.exceptions.UnsupportedAlgorithm) as error:
                exceptions[loader] = error

        # no luck
        raise errors.Error('Unable to deserialize key: {0}'.format(exceptions))

    @classmethod
    def load(cls, data: bytes, password: Optional[bytes] = None) -> 'JWK':
        """Load serialized key as JWK.

        :param bytes data: JSON JWK, or public or private key serialized
            as PEM or DER. Anything else is taken as a symmetric key.
        :param bytes password: Optional password.

        :raises errors.Error: if unable to deserialize, or unsupported
            JWK algorithm

        :returns: JWK of an appropriate type.
        :rtype: `JWK`

        """
        if data.lstrip().startswith(b'{'):
            try:
                return cls.json_loads(data)
            except (ValueError, jose_errors.DeserializationError) as error:
                raise errors.ParseError(str(error)) from error
        try:
            key = cls._load_cryptography_key(data, password)
        except errors.Error as error:
            logger.debug('Loading symmetric key, asymmetric failed: %s', error)
            return OctetSequenceKey(key=data)

        if cls.typ is not NotImplemented and not isinstance(
                key, cls.cryptography_key_types):
            raise errors.Error('Unable to deserialize {0} into {1}'.format(
                key.__class__, cls.__name__))
        for jwk_cls in cls.TYPES.values():
            if isinstance(key, jwk_cls.cryptography_key_types):
                return jwk_cls(key=key)
        raise errors.Error('Unsupported algorithm: {0}'.format(key.__class__))


@JWK.register
class RSAKey(JWK):
    """RSA JWK.

    :ivar key: `cryptography.hazmat.primitives.rsa.RSAPrivateKey`
        or `cryptography.hazmat.primitives.rsa.RSAPublicKey` wrapped
        in `josepy.util.ComparableRSAKey`

    """
    typ = 'RSA'
    cryptography_key_types = (rsa.RSAPublicKey, rsa.RSAPrivateKey)
    private_key_types = (rsa.RSAPrivateKey,)
    __slots__ = ('key',)
    required = ('e', JWK.type_field_name, 'n')

    def __init__(self, **kwargs: Any) -> None:
        if 'key' in kwargs and not isinstance(
                kwargs['key'], jose_util.ComparableRSAKey):
            kwargs['key'] = jose_util.ComparableRSAKey(kwargs['key'])
        super().__init__(**kwargs)

    def public_key(self) -> 'RSAKey':
        return self.update(key=self.key.public_key())

    @classmethod
    def fields_from_json(cls, jobj: Dict[str, Any]) -> Dict[str, Any]:
        # pylint: disable=invalid-name
        fields = super().fields_from_json(jobj)
        n, e = (_decode_uint(jobj, x) for x in ('n', 'e'))
        public_numbers = rsa.RSAPublicNumbers(e=e, n=n)
        try:
            if 'd' not in jobj:  # public key
                key = public_numbers.public_key()
            else:  # private key
                d = _decode_uint(jobj, 'd')
                if ('p' in jobj or 'q' in jobj or 'dp' in jobj or
                        'dq' in jobj or 'qi' in jobj or 'oth' in jobj):
                    # "If the producer includes any of the other private
                    # key parameters, then all of the others MUST be
                    # present, with the exception of "oth", which MUST
                    # only be present when more than two prime factors
                    # were used."
                    missing = [x for x in ('p', 'q', 'dp', 'dq', 'qi') if x not in jobj]
                    if missing:
                        raise jose_errors.DeserializationError(
                            'Some private parameters are missing: {0}'.format(missing))
                    if 'oth' in jobj:
                        raise jose_errors.DeserializationError(
                            'Multi-prime RSA keys are not supported')
                    p, q, dp, dq, qi = (
                        _decode_uint(jobj, x) for x in ('p', 'q', 'dp', 'dq', 'qi'))
                else:
                    p, q = rsa.rsa_recover_prime_factors(n, e, d)
                    dp = rsa.rsa_crt_dmp1(d, p)
                    dq = rsa.rsa_crt_dmq1(d, q)
                    qi = rsa.rsa_crt_iqmp(p, q)
                key = rsa.RSAPrivateNumbers(
                    p, q, d, dp, dq, qi, public_numbers).private_key()
        except ValueError as error:
            raise jose_errors.DeserializationError(error)

        fields['key'] = key
        return fields

    def fields_to_partial_json(self) -> Dict[str, Any]:
        jobj = super().fields_to_partial_json()
        if not self.is_private:
            numbers = self.key.public_numbers()
            params = {
                'n': numbers.n,
                'e': numbers.e,
            }
        else:
            private = self.key.private_numbers()
            public = self.key.public_key().public_numbers()
            params = {
                'n': public.n,
                'e': public.e,
                'd': private.d,
                'p': private.p,
                'q': private.q,
                'dp': private.dmp1,
                'dq': private.dmq1,
                'qi': private.iqmp,
            }
        jobj.update((name, _encode_uint(value)) for name, value in params.items())
        return jobj


@JWK.register
class ECKey(JWK):
    """EC JWK.

    :ivar key: `cryptography.hazmat.primitives.asymmetric.ec.EllipticCurvePrivateKey`
        or `EllipticCurvePublicKey` wrapped in `josepy.util.ComparableECKey`

    """
    typ = 'EC'
    cryptography_key_types = (ec.EllipticCurvePublicKey, ec.EllipticCurvePrivateKey)
    private_key_types = (ec.EllipticCurvePrivateKey,)
    __slots__ = ('key',)
    required = ('crv', JWK.type_field_name, 'x', 'y')

    def __init__(self, **kwargs: Any) -> None:
        if 'key' in kwargs and not isinstance(
                kwargs['key'], jose_util.ComparableECKey):
            kwargs['key'] = jose_util.ComparableECKey(kwargs['key'])
        super().__init__(**kwargs)

    @property
    def curve(self) -> Optional[algorithms.Curve]:
        return algorithms.Curve.for_std_name(self.key.curve.name)

    def public_key(self) -> 'ECKey':
        return self.update(key=self.key.public_key())

    @classmethod
    def fields_from_json(cls, jobj: Dict[str, Any]) -> Dict[str, Any]:
        fields = super().fields_from_json(jobj)
        crv = jobj.get('crv')
        curve = algorithms.Curve.REGISTRY.get(crv) if isinstance(crv, str) else None
        if curve is None or curve.crypto_curve is None:
            raise jose_errors.DeserializationError('Unsupported EC curve: {0!r}'.format(crv))
        x, y = (int.from_bytes(_decode_member(jobj, name, curve.coordinate_size), 'big')
                for name in ('x', 'y'))
        try:
            key = ec.EllipticCurvePublicNumbers(x, y, curve.crypto_curve()).public_key()
            if 'd' in jobj:
                d = int.from_bytes(_decode_member(jobj, 'd', curve.coordinate_size), 'big')
                private = ec.derive_private_key(d, curve.crypto_curve())
                if private.public_key().public_numbers() != key.public_numbers():
                    raise jose_errors.DeserializationError(
                        'Private key does not match the public coordinates')
                key = private
        except ValueError as error:  # point not on the curve
            raise jose_errors.DeserializationError(error)
        fields['key'] = key
        return fields

    def fields_to_partial_json(self) -> Dict[str, Any]:
        jobj = super().fields_to_partial_json()
        curve = self.curve
        if curve is None:
            raise jose_errors.SerializationError(
                'Unsupported EC curve: {0}'.format(self.key.curve.name))
        size = curve.coordinate_size
        if self.is_private:
            private = self.key.private_numbers()
            public = private.public_numbers
            jobj['d'] = _encode_uint(private.private_value, size)
        else:
            public = self.key.public_numbers()
        jobj.update({
            'crv': curve.name,
            'x': _encode_uint(public.x, size),
            'y': _encode_uint(public.y, size),
        })
        return jobj


@JWK.register
class OctetSequenceKey(JWK):
    """Symmetric JWK."""
    typ = 'oct'
    cryptography_key_types = ()
    private_key_types = (bytes,)
    __slots__ = ('key',)
    required = ('k', JWK.type_field_name)

    def fields_to_partial_json(self) -> Dict[str, Any]:
        jobj = super().fields_to_partial_json()
        jobj['k'] = json_util.encode_b64jose(self.key)
        return jobj

    @classmethod
    def fields_from_json(cls, jobj: Dict[str, Any]) -> Dict[str, Any]:
        fields = super().fields_from_json(jobj)
        fields['key'] = _decode_member(jobj, 'k')
        return fields

    def public_key(self) -> 'OctetSequenceKey':
        return self


_OKP_KEY_TYPES = {
    algorithms.ED25519: (ed25519.Ed25519PublicKey, ed25519.Ed25519PrivateKey),
    algorithms.X25519: (x25519.X25519PublicKey, x25519.X25519PrivateKey),
}


@JWK.register
class OctetKeyPair(JWK):
    """Octet key pair JWK (RFC 8037), Ed25519 or X25519.

    :ivar key: `cryptography` Ed25519/X25519 key wrapped in
        `.ComparableOKPKey`

    """
    typ = 'OKP'
    cryptography_key_types = (
        ed25519.Ed25519PublicKey, ed25519.Ed25519PrivateKey,
        x25519.X25519PublicKey, x25519.X25519PrivateKey)
    private_key_types = (ed25519.Ed25519PrivateKey, x25519.X25519PrivateKey)
    __slots__ = ('key',)
    required = ('crv', JWK.type_field_name, 'x')

    def __init__(self, **kwargs: Any) -> None:
        if 'key' in kwargs and not isinstance(kwargs['key'], util.ComparableOKPKey):
            kwargs['key'] = util.ComparableOKPKey(kwargs['key'])
        super().__init__(**kwargs)

    @property
    def curve(self) -> Optional[algorithms.Curve]:
        for curve, key_types in _OKP_KEY_TYPES.items():
            if isinstance(self.cryptography_key, key_types):
                return curve
        return None  # pragma: no cover

    def public_key(self) -> 'OctetKeyPair':
        return self.update(key=self.key.public_key())

    @classmethod
    def fields_from_json(cls, jobj: Dict[str, Any]) -> Dict[str, Any]:
        fields = super().fields_from_json(jobj)
        crv = jobj.get('crv')
        curve = algorithms.Curve.REGISTRY.get(crv) if isinstance(crv, str) else None
        if curve not in _OKP_KEY_TYPES:
            raise jose_errors.DeserializationError('Unsupported OKP curve: {0!r}'.format(crv))
        public_cls, private_cls = _OKP_KEY_TYPES[curve]
        try:
            if 'd' in jobj:
                key = private_cls.from_private_bytes(_decode_member(jobj, 'd'))
                if key.public_key().public_bytes(
                        serialization.Encoding.Raw, serialization.PublicFormat.Raw
                ) != _decode_member(jobj, 'x'):
                    raise jose_errors.DeserializationError(
                        'Private key does not match the public key')
            else:
                key = public_cls.from_public_bytes(_decode_member(jobj, 'x'))
        except ValueError as error:
            raise jose_errors.DeserializationError(error)
        fields['key'] = key
        return fields

    def fields_to_partial_json(self) -> Dict[str, Any]:
        jobj = super().fields_to_partial_json()
        key = self.cryptography_key
        public = key.public_key() if self.is_private else key
        jobj['crv'] = self.curve.name
        jobj['x'] = json_util.encode_b64jose(public.public_bytes(
            serialization.Encoding.Raw, serialization.PublicFormat.Raw))
        if self.is_private:
            jobj['d'] = json_util.encode_b64jose(key.private_bytes(
                serialization.Encoding.Raw, serialization.PrivateFormat.Raw,
                serialization.NoEncryption()))
        return jobj


class JWKSet(interfaces.JSONDeSerializable):
    """JSON Web Key Set.

    Keys keep their original order. Key IDs are not required to be
    unique, lookups return the first match.

    """

    def __init__(self, keys: Iterable[JWK] = ()) -> None:
        self.keys: Tuple[JWK, ...] = tuple(keys)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, JWKSet):
            return NotImplemented
        return self.keys == other.keys

    def __hash__(self) -> int:
        return hash(self.keys)

    def __repr__(self) -> str:
        return 'JWKSet({0!r})'.format(list(self.keys))

    def get_key_by_key_id(self, kid: str) -> Optional[JWK]:
        """First key with key ID ``kid``, or ``None``."""
        for jwk in self.keys:
            if jwk.kid == kid:
                return jwk
        return None

    def public_jwk_set(self) -> 'JWKSet':
        """Copy with private material removed; symmetric keys are dropped."""
        return JWKSet(jwk.public_key() for jwk in self.keys
                      if not isinstance(jwk, OctetSequenceKey))

    def to_partial_json(self) -> Dict[str, List[JWK]]:
        return {'keys': list(self.keys)}

    @classmethod
    def from_json(cls, jobj: Any) -> 'JWKSet':
        if not isinstance(jobj, dict) or not isinstance(jobj.get('keys'), list):
            raise jose_errors.DeserializationError('JWK set must have a "keys" array')
        keys = []
        for member in jobj['keys']:
            try:
                keys.append(JWK.from_json(member))
            except jose_errors.UnrecognizedTypeError as error:
                # RFC 7517, section 5: ignore keys of unknown type
                logger.debug('Skipping JWK set member: %s', error, exc_info=True)
        return cls(keys)
