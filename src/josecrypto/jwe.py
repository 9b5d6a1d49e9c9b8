"""JSON Web Encryption, compact serialization.

https://tools.ietf.org/html/rfc7516#section-7.1

"""
import enum
import logging
from typing import Optional

from josepy import json_util

from josecrypto import errors
from josecrypto import header as jose_header
from josecrypto import interfaces
from josecrypto import jws

logger = logging.getLogger(__name__)


def _decode_optional(name: str, b64text: str) -> Optional[bytes]:
    return jws.decode_part(name, b64text) if b64text else None


def _encode_optional(data: Optional[bytes]) -> str:
    return json_util.encode_b64jose(data) if data else ''


class JWEObject:
    """JWE in compact serialization.

    Lifecycle: :attr:`State.UNENCRYPTED` -> :attr:`State.ENCRYPTED` ->
    :attr:`State.DECRYPTED`. A parsed JWE starts out encrypted.

    :ivar header: :class:`~josecrypto.header.JWEHeader`
    :ivar bytes payload: Plaintext, ``None`` while only the encrypted
        form is known.
    :ivar bytes encrypted_key: ``None`` if empty.
    :ivar bytes iv:
    :ivar bytes ciphertext:
    :ivar bytes auth_tag:

    """

    class State(enum.Enum):
        """JWE lifecycle state."""
        UNENCRYPTED = 'unencrypted'
        ENCRYPTED = 'encrypted'
        DECRYPTED = 'decrypted'

    def __init__(self, header: jose_header.JWEHeader,
                 payload: Optional[bytes] = None) -> None:
        if header is None:
            raise ValueError('The JWE header is required')
        self.header = header
        self.payload = payload
        self.encrypted_key: Optional[bytes] = None
        self.iv: Optional[bytes] = None
        self.ciphertext: Optional[bytes] = None
        self.auth_tag: Optional[bytes] = None
        self.state = self.State.UNENCRYPTED
        self._parsed: Optional[str] = None

    def __repr__(self) -> str:
        return '{0}(header={1!r}, state={2})'.format(
            self.__class__.__name__, self.header, self.state.name)

    @classmethod
    def from_parts(cls, header_b64: str, encrypted_key_b64: str, iv_b64: str,
                   ciphertext_b64: str, auth_tag_b64: str) -> 'JWEObject':
        """JWE from its five Base64URL parts, in encrypted state.

        Empty parts decode to ``None``, except the ciphertext which
        decodes to ``b""``.

        :raises errors.ParseError: if a part cannot be decoded

        """
        jwe = cls(jose_header.JWEHeader.parse(header_b64))
        jwe.encrypted_key = _decode_optional('encrypted key', encrypted_key_b64)
        jwe.iv = _decode_optional('initialization vector', iv_b64)
        jwe.ciphertext = jws.decode_part('ciphertext', ciphertext_b64)
        jwe.auth_tag = _decode_optional('authentication tag', auth_tag_b64)
        jwe.state = cls.State.ENCRYPTED
        jwe._parsed = '.'.join((header_b64, encrypted_key_b64, iv_b64,
                                ciphertext_b64, auth_tag_b64))
        return jwe

    @classmethod
    def parse(cls, text: str) -> 'JWEObject':
        """Parse ``header.encryptedKey.iv.ciphertext.tag``.

        :raises errors.ParseError: if not exactly five parts, or a part
            cannot be decoded

        """
        return cls.from_parts(*jws.split_compact(text, 5, 'JWE'))

    def encrypt(self, encrypter: interfaces.JWEEncrypter) -> None:
        """Encrypt :attr:`payload` with ``encrypter``.

        The header is replaced by the one the encrypter returns.

        :raises errors.IllegalStateError: if not in unencrypted state

        """
        if self.state is not self.State.UNENCRYPTED:
            raise errors.IllegalStateError('The JWE object must be in an unencrypted state')
        if self.payload is None:
            raise errors.IllegalStateError('The JWE object has no payload to encrypt')
        parts = encrypter.encrypt(self.header, self.payload)
        self.header = parts.header
        self.encrypted_key = parts.encrypted_key
        self.iv = parts.iv
        self.ciphertext = parts.ciphertext
        self.auth_tag = parts.auth_tag
        self.state = self.State.ENCRYPTED

    def decrypt(self, decrypter: interfaces.JWEDecrypter) -> None:
        """Decrypt with ``decrypter``, setting :attr:`payload`.

        On failure the object stays encrypted.

        :raises errors.IllegalStateError: if not in encrypted state
        :raises errors.AuthenticationError: if decryption fails

        """
        if self.state is not self.State.ENCRYPTED:
            raise errors.IllegalStateError('The JWE object must be in an encrypted state')
        self.payload = decrypter.decrypt(self.header, self.encrypted_key, self.iv,
                                         self.ciphertext, self.auth_tag)
        self.state = self.State.DECRYPTED
        logger.debug('Decrypted JWE with %s/%s', self.header.alg, self.header.enc)

    def serialize(self) -> str:
        """Compact serialization.

        A parsed JWE is serialized exactly as it was received.

        :raises errors.IllegalStateError: if not encrypted yet

        """
        if self.state is self.State.UNENCRYPTED:
            raise errors.IllegalStateError('The JWE object must be encrypted first')
        if self._parsed is not None:
            return self._parsed
        return '.'.join((self.header.to_base64(), _encode_optional(self.encrypted_key),
                         _encode_optional(self.iv), json_util.encode_b64jose(self.ciphertext),
                         _encode_optional(self.auth_tag)))
