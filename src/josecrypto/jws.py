"""JSON Web Signature, compact serialization.

https://tools.ietf.org/html/rfc7515#section-7.1

"""
import enum
import logging
from typing import Optional

from josepy import errors as jose_errors
from josepy import json_util

from josecrypto import errors
from josecrypto import header as jose_header
from josecrypto import interfaces

logger = logging.getLogger(__name__)


def decode_part(name: str, b64text: str) -> bytes:
    """Decode one Base64URL segment of a compact serialization.

    :raises errors.ParseError: if the segment is not valid Base64URL

    """
    if not b64text:
        return b''
    try:
        return json_util.decode_b64jose(b64text)
    except jose_errors.DeserializationError as error:
        raise errors.ParseError('Invalid {0}: {1}'.format(name, error)) from error


def split_compact(text: str, count: int, kind: str):
    """Split a compact serialization into exactly ``count`` parts."""
    parts = text.strip().split('.')
    if len(parts) != count:
        raise errors.ParseError('Invalid {0} serialization: {1} parts expected, got {2}'.format(
            kind, count, len(parts)))
    return parts


class JWSObject:
    """JWS in compact serialization.

    Lifecycle: :attr:`State.UNSIGNED` -> :attr:`State.SIGNED` ->
    :attr:`State.VERIFIED`. A parsed JWS starts out signed.

    Not safe for concurrent :meth:`sign`/:meth:`verify` on the same
    instance.

    :ivar header: :class:`~josecrypto.header.JWSHeader`
    :ivar bytes payload: Payload.
    :ivar bytes signature: Signature, ``None`` until signed.

    """

    class State(enum.Enum):
        """JWS lifecycle state."""
        UNSIGNED = 'unsigned'
        SIGNED = 'signed'
        VERIFIED = 'verified'

    def __init__(self, header: jose_header.JWSHeader, payload: bytes) -> None:
        if header is None or payload is None:
            raise ValueError('Header and payload are required')
        self.header = header
        self.payload = payload
        self.signature: Optional[bytes] = None
        self.state = self.State.UNSIGNED
        self._payload_b64 = json_util.encode_b64jose(payload)
        self._signature_b64: Optional[str] = None
        self._parsed: Optional[str] = None

    def __repr__(self) -> str:
        return '{0}(header={1!r}, state={2})'.format(
            self.__class__.__name__, self.header, self.state.name)

    @classmethod
    def from_parts(cls, header_b64: str, payload_b64: str,
                   signature_b64: str) -> 'JWSObject':
        """JWS from its three Base64URL parts, in signed state.

        :raises errors.ParseError: if a part cannot be decoded

        """
        jws = cls(jose_header.JWSHeader.parse(header_b64),
                  decode_part('payload', payload_b64))
        jws.signature = decode_part('signature', signature_b64)
        jws._payload_b64 = payload_b64
        jws._signature_b64 = signature_b64
        jws.state = cls.State.SIGNED
        return jws

    @classmethod
    def parse(cls, text: str) -> 'JWSObject':
        """Parse compact serialization ``header.payload.signature``.

        :raises errors.ParseError: if not exactly three parts, or a
            part cannot be decoded

        """
        jws = cls.from_parts(*split_compact(text, 3, 'JWS'))
        jws._parsed = text.strip()
        return jws

    @property
    def signing_input(self) -> bytes:
        """``Base64URL(header) || '.' || Base64URL(payload)``"""
        return jose_header.signing_input(self.header, self._payload_b64)

    def sign(self, signer: interfaces.JWSSigner) -> None:
        """Sign with ``signer``.

        :raises errors.IllegalStateError: if not in unsigned state

        """
        if self.state is not self.State.UNSIGNED:
            raise errors.IllegalStateError('The JWS object must be in an unsigned state')
        self.signature = signer.sign(self.header, self.signing_input)
        self._signature_b64 = json_util.encode_b64jose(self.signature)
        self.state = self.State.SIGNED

    def verify(self, verifier: interfaces.JWSVerifier) -> bool:
        """Verify with ``verifier``.

        A failed verification leaves the state unchanged, so another
        key can be tried.

        :raises errors.IllegalStateError: if not in signed state

        """
        if self.state is not self.State.SIGNED:
            raise errors.IllegalStateError('The JWS object must be in a signed state')
        verified = verifier.verify(self.header, self.signing_input, self.signature)
        if verified:
            self.state = self.State.VERIFIED
        else:
            logger.debug('JWS signature with %s did not verify', self.header.alg)
        return verified

    def serialize(self) -> str:
        """Compact serialization.

        A parsed JWS is serialized exactly as it was received.

        :raises errors.IllegalStateError: if not signed yet

        """
        if self.state is self.State.UNSIGNED:
            raise errors.IllegalStateError('The JWS object must be signed first')
        if self._parsed is not None:
            return self._parsed
        return '.'.join((self.header.to_base64(), self._payload_b64, self._signature_b64))
