"""JWE content encryption.

Shared by every key management algorithm once a CEK is known.

"""
import collections
import os
from typing import Optional

from josecrypto import aes
from josecrypto import algorithms
from josecrypto import constants
from josecrypto import deflate
from josecrypto import errors
from josecrypto import header as jose_header
from josecrypto import support

ContentCipher = collections.namedtuple('ContentCipher', 'iv_length encrypt decrypt')
"""Content encryption primitive: IV length (bytes) and the AEAD functions."""

JWECryptoParts = collections.namedtuple(
    'JWECryptoParts', 'header encrypted_key iv ciphertext auth_tag')
"""Encrypter output. ``encrypted_key`` is ``None`` when no key is transmitted."""

_CBC_HMAC = ContentCipher(
    constants.CBC_IV_LENGTH, aes.encrypt_cbc_hmac, aes.decrypt_cbc_hmac)
_GCM = ContentCipher(constants.GCM_IV_LENGTH, aes.encrypt_gcm, aes.decrypt_gcm)

CONTENT_CIPHERS = {
    algorithms.A128CBC_HS256: _CBC_HMAC,
    algorithms.A192CBC_HS384: _CBC_HMAC,
    algorithms.A256CBC_HS512: _CBC_HMAC,
    algorithms.A128GCM: _GCM,
    algorithms.A192GCM: _GCM,
    algorithms.A256GCM: _GCM,
}

SUPPORTED_ENCRYPTION_METHODS = algorithms.AES_CBC_HMAC_SHA | algorithms.AES_GCM
"""Content encryption methods every encrypter supports."""

support.check_dispatch_table(
    CONTENT_CIPHERS, SUPPORTED_ENCRYPTION_METHODS, 'content encryption')


def generate_cek(enc: algorithms.EncryptionMethod) -> bytes:
    """Fresh random CEK for ``enc``."""
    return os.urandom(enc.cek_bit_length // 8)


def compute_aad(header: jose_header.Header) -> bytes:
    """AAD: ASCII of the Base64URL encoded header."""
    return header.to_base64().encode('ascii')


def check_cek(enc: algorithms.EncryptionMethod, cek: bytes) -> None:
    """CEK length must match ``enc``.

    :raises errors.KeyLengthError: otherwise

    """
    if len(cek) * 8 != enc.cek_bit_length:
        raise errors.KeyLengthError(
            'The content encryption key for {0} must be {1} bits, got {2}'.format(
                enc, enc.cek_bit_length, len(cek) * 8))


def encrypt(header: jose_header.JWEHeader, plaintext: bytes, cek: bytes,
            encrypted_key: Optional[bytes]) -> JWECryptoParts:
    """Compress (if requested) and encrypt ``plaintext`` under ``cek``.

    ``header`` must be final: it is the AAD.

    """
    enc = support.ensure_encryption_method(header.enc, SUPPORTED_ENCRYPTION_METHODS)
    check_cek(enc, cek)
    cipher = CONTENT_CIPHERS[enc]
    iv = os.urandom(cipher.iv_length)
    ciphertext, auth_tag = cipher.encrypt(
        cek, iv, deflate.apply(header.zip, plaintext), compute_aad(header))
    return JWECryptoParts(header, encrypted_key, iv, ciphertext, auth_tag)


def decrypt(header: jose_header.JWEHeader, iv: Optional[bytes], ciphertext: bytes,
            auth_tag: Optional[bytes], cek: bytes,
            max_decompressed_size: int = constants.MAX_DECOMPRESSED_SIZE) -> bytes:
    """Decrypt and decompress (if needed) the JWE content.

    :raises errors.AuthenticationError: on tag mismatch
    :raises errors.MalformedInputError: if IV or tag is missing

    """
    enc = support.ensure_encryption_method(header.enc, SUPPORTED_ENCRYPTION_METHODS)
    if iv is None:
        raise errors.MalformedInputError('Missing JWE initialization vector')
    if auth_tag is None:
        raise errors.MalformedInputError('Missing JWE authentication tag')
    check_cek(enc, cek)
    plaintext = CONTENT_CIPHERS[enc].decrypt(
        cek, iv, ciphertext, auth_tag, compute_aad(header))
    return deflate.revert(header.zip, plaintext, max_decompressed_size)
