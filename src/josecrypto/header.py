"""JOSE Header."""
import binascii
import json
from typing import Any
from typing import Dict
from typing import FrozenSet

from josepy import b64
from josepy import errors as jose_errors
from josepy import json_util
from josepy import util as jose_util

from josecrypto import algorithms
from josecrypto import errors
from josecrypto import jwk as jose_jwk


def _encode_b64_field(name: str) -> json_util.Field:
    return json_util.Field(name, omitempty=True, decoder=json_util.decode_b64jose,
                           encoder=json_util.encode_b64jose)


def _to_json_value(value: Any) -> Any:
    # undoes Field.default_decoder: tuples back to lists, frozendicts to dicts
    if isinstance(value, (list, tuple)):
        return [_to_json_value(item) for item in value]
    if isinstance(value, (dict, jose_util.frozendict)):
        return {name: _to_json_value(item) for name, item in value.items()}
    return value


class Header(json_util.JSONObjectWithFields):
    """JOSE Header.

    Registered parameters are fields. Anything else ends up, decoded
    into immutable types, in :attr:`custom_params` and is serialized
    back untouched.

    A header obtained from :meth:`parse` remembers the Base64URL text
    it was parsed from in :attr:`parsed_base64`, so that signatures and
    the JWE AAD are computed over the exact received bytes. Any
    :meth:`update` drops it.

    :ivar alg: :class:`~josecrypto.algorithms.Algorithm`
    :ivar tuple crit: Names of critical parameters.
    :ivar custom_params: :class:`josepy.util.frozendict` of parameters
        with unregistered names.
    :ivar str parsed_base64: Base64URL text the header was parsed from.

    """
    __slots__ = ('custom_params', 'parsed_base64')

    alg = json_util.Field('alg', decoder=algorithms.Algorithm.from_json)
    typ = json_util.Field('typ', omitempty=True)
    cty = json_util.Field('cty', omitempty=True)
    kid = json_util.Field('kid', omitempty=True)
    jku = json_util.Field('jku', omitempty=True)
    jwk = json_util.Field('jwk', decoder=jose_jwk.JWK.from_json, omitempty=True)
    x5u = json_util.Field('x5u', omitempty=True)
    x5c = json_util.Field('x5c', omitempty=True, default=())
    x5t = _encode_b64_field('x5t')
    x5tS256 = _encode_b64_field('x5t#S256')
    crit = json_util.Field('crit', omitempty=True, default=())

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault('custom_params', jose_util.frozendict({}))
        kwargs.setdefault('parsed_base64', None)
        if not isinstance(kwargs['custom_params'], jose_util.frozendict):
            kwargs['custom_params'] = jose_util.frozendict(kwargs['custom_params'])
        super().__init__(**kwargs)

    @crit.decoder  # type: ignore
    def crit(value):  # pylint: disable=missing-docstring,no-self-argument
        if (not isinstance(value, list) or not value or
                not all(isinstance(name, str) and name for name in value)):
            raise jose_errors.DeserializationError(
                '"crit" must be a non-empty list of parameter names')
        return tuple(value)

    @classmethod
    def registered_names(cls) -> FrozenSet[str]:
        """JSON names of the registered header parameters."""
        return frozenset(field.json_name for field in cls._fields.values())

    def update(self, **kwargs: Any) -> 'Header':
        kwargs.setdefault('parsed_base64', None)
        return super().update(**kwargs)

    def get_custom_param(self, name: str) -> Any:
        """Custom parameter value, ``None`` if absent."""
        return self.custom_params.get(name)

    @classmethod
    def fields_from_json(cls, jobj: Any) -> Dict[str, Any]:
        if not isinstance(jobj, dict):
            raise jose_errors.DeserializationError('Header must be a JSON object')
        fields = super().fields_from_json(jobj)
        registered = cls.registered_names()
        for name in fields['crit']:
            if name in registered:
                raise jose_errors.DeserializationError(
                    'Registered parameter {0!r} must not be listed in "crit"'.format(name))
            if name not in jobj:
                raise jose_errors.DeserializationError(
                    'Critical parameter {0!r} is missing from the header'.format(name))
        fields['custom_params'] = jose_util.frozendict(dict(
            (name, json_util.Field.default_decoder(value))
            for name, value in jobj.items() if name not in registered))
        return fields

    def to_partial_json(self) -> Dict[str, Any]:
        jobj = self.fields_to_partial_json()
        for name, value in self.custom_params.items():
            jobj.setdefault(name, _to_json_value(value))
        return jobj

    def to_base64(self) -> str:
        """Base64URL encoded header, as it appears in compact serialization.

        Returns the parsed text verbatim if there is one.

        """
        if self.parsed_base64 is not None:
            return self.parsed_base64
        return json_util.encode_b64jose(
            json.dumps(self.to_json(), separators=(',', ':')).encode('utf-8'))

    @classmethod
    def parse(cls, b64text: str) -> 'Header':
        """Parse a Base64URL encoded header.

        :raises errors.ParseError: if the text is not a valid header

        """
        try:
            jobj = json.loads(b64.b64decode(b64text).decode('utf-8'))
            header = cls.from_json(jobj)
        except (ValueError, binascii.Error, jose_errors.DeserializationError) as error:
            raise errors.ParseError('Invalid header: {0}'.format(error)) from error
        return header.update(parsed_base64=b64text)


class JWSHeader(Header):
    """JWS Header."""
    __slots__ = ('custom_params', 'parsed_base64')

    alg = json_util.Field('alg', decoder=algorithms.JWSAlgorithm.from_json)


class JWEHeader(Header):
    """JWE Header.

    :ivar enc: :class:`~josecrypto.algorithms.EncryptionMethod`
    :ivar str zip: Compression algorithm, ``"DEF"`` or ``None``.
    :ivar epk: Ephemeral public key (:class:`~josecrypto.jwk.JWK`), ECDH.
    :ivar bytes apu: Agreement PartyUInfo, ECDH.
    :ivar bytes apv: Agreement PartyVInfo, ECDH.
    :ivar bytes p2s: PBES2 salt input.
    :ivar int p2c: PBES2 iteration count.
    :ivar bytes iv: Key wrap IV, AES GCM key wrap.
    :ivar bytes tag: Key wrap authentication tag, AES GCM key wrap.

    """
    __slots__ = ('custom_params', 'parsed_base64')

    alg = json_util.Field('alg', decoder=algorithms.JWEAlgorithm.from_json)
    enc = json_util.Field('enc', decoder=algorithms.EncryptionMethod.from_json)
    zip = json_util.Field('zip', omitempty=True)
    epk = json_util.Field('epk', decoder=jose_jwk.JWK.from_json, omitempty=True)
    apu = _encode_b64_field('apu')
    apv = _encode_b64_field('apv')
    p2s = _encode_b64_field('p2s')
    p2c = json_util.Field('p2c', omitempty=True)
    iv = _encode_b64_field('iv')
    tag = _encode_b64_field('tag')

    @p2c.decoder  # type: ignore
    def p2c(value):  # pylint: disable=missing-docstring,no-self-argument
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            raise jose_errors.DeserializationError('"p2c" must be a positive integer')
        return value

    @zip.decoder  # type: ignore
    def zip(value):  # pylint: disable=missing-docstring,no-self-argument
        if not isinstance(value, str):
            raise jose_errors.DeserializationError('"zip" must be a string')
        return value


def signing_input(header: Header, payload_b64: str) -> bytes:
    """``Base64URL(header) || '.' || Base64URL(payload)``, as ASCII bytes."""
    return '{0}.{1}'.format(header.to_base64(), payload_b64).encode('ascii')
