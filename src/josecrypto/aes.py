"""AES primitives used by JWE.

https://tools.ietf.org/html/rfc7518#section-5.2

"""
import collections
import struct

import cryptography.exceptions
from cryptography.hazmat.primitives import constant_time
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac
from cryptography.hazmat.primitives import keywrap
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import algorithms as cipher_algorithms
from cryptography.hazmat.primitives.ciphers import Cipher
from cryptography.hazmat.primitives.ciphers import modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from josecrypto import constants
from josecrypto import errors

AuthenticatedCipherText = collections.namedtuple(
    'AuthenticatedCipherText', 'ciphertext auth_tag')
"""Ciphertext with its authentication tag."""

_CBC_HMAC_HASHES = {
    32: hashes.SHA256,
    48: hashes.SHA384,
    64: hashes.SHA512,
}

AES_KEY_LENGTHS = (16, 24, 32)
"""AES key lengths (bytes)."""


def _check_length(name: str, value: bytes, lengths) -> None:
    if len(value) not in lengths:
        raise errors.KeyLengthError('{0} must be {1} bytes long, got {2}'.format(
            name, ' or '.join(str(length) for length in lengths), len(value)))


def _cbc_hmac_tag(mac_key: bytes, hash_cls, aad: bytes, iv: bytes,
                  ciphertext: bytes) -> bytes:
    mac = hmac.HMAC(mac_key, hash_cls())
    mac.update(aad)
    mac.update(iv)
    mac.update(ciphertext)
    mac.update(struct.pack('>Q', len(aad) * 8))
    # T = first half of the HMAC output
    return mac.finalize()[:len(mac_key)]


def _split_cbc_hmac_key(key: bytes):
    _check_length('AES_CBC_HMAC_SHA2 key', key, tuple(_CBC_HMAC_HASHES))
    half = len(key) // 2
    return key[:half], key[half:], _CBC_HMAC_HASHES[len(key)]


def encrypt_cbc_hmac(key: bytes, iv: bytes, plaintext: bytes,
                     aad: bytes) -> AuthenticatedCipherText:
    """AES_CBC_HMAC_SHA2 authenticated encryption.

    :param bytes key: Combined key, MAC key first, 32, 48 or 64 bytes.
    :param bytes iv: 16 byte initialization vector.

    """
    mac_key, enc_key, hash_cls = _split_cbc_hmac_key(key)
    _check_length('AES-CBC IV', iv, (constants.CBC_IV_LENGTH,))
    padder = padding.PKCS7(cipher_algorithms.AES.block_size).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(cipher_algorithms.AES(enc_key), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return AuthenticatedCipherText(
        ciphertext, _cbc_hmac_tag(mac_key, hash_cls, aad, iv, ciphertext))


def decrypt_cbc_hmac(key: bytes, iv: bytes, ciphertext: bytes, auth_tag: bytes,
                     aad: bytes) -> bytes:
    """AES_CBC_HMAC_SHA2 authenticated decryption.

    The tag is checked, in constant time, before anything is decrypted.

    :raises errors.AuthenticationError: if the tag does not match

    """
    mac_key, enc_key, hash_cls = _split_cbc_hmac_key(key)
    expected = _cbc_hmac_tag(mac_key, hash_cls, aad, iv, ciphertext)
    if not constant_time.bytes_eq(expected, auth_tag):
        raise errors.AuthenticationError('MAC check failed')
    _check_length('AES-CBC IV', iv, (constants.CBC_IV_LENGTH,))
    try:
        decryptor = Cipher(cipher_algorithms.AES(enc_key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(cipher_algorithms.AES.block_size).unpadder()
        return unpadder.update(padded) + unpadder.finalize()
    except ValueError as error:
        raise errors.MalformedInputError('Invalid AES-CBC ciphertext: {0}'.format(error))


def encrypt_gcm(key: bytes, iv: bytes, plaintext: bytes,
                aad: bytes) -> AuthenticatedCipherText:
    """AES GCM encryption with a 128-bit tag."""
    _check_length('AES-GCM key', key, AES_KEY_LENGTHS)
    _check_length('AES-GCM IV', iv, (constants.GCM_IV_LENGTH,))
    sealed = AESGCM(key).encrypt(iv, plaintext, aad)
    return AuthenticatedCipherText(
        sealed[:-constants.GCM_TAG_LENGTH], sealed[-constants.GCM_TAG_LENGTH:])


def decrypt_gcm(key: bytes, iv: bytes, ciphertext: bytes, auth_tag: bytes,
                aad: bytes) -> bytes:
    """AES GCM decryption.

    :raises errors.AuthenticationError: if the tag does not match

    """
    _check_length('AES-GCM key', key, AES_KEY_LENGTHS)
    _check_length('AES-GCM IV', iv, (constants.GCM_IV_LENGTH,))
    if len(auth_tag) != constants.GCM_TAG_LENGTH:
        raise errors.AuthenticationError('AES-GCM tag must be {0} bytes long'.format(
            constants.GCM_TAG_LENGTH))
    try:
        return AESGCM(key).decrypt(iv, ciphertext + auth_tag, aad)
    except cryptography.exceptions.InvalidTag as error:
        raise errors.AuthenticationError('AES-GCM tag check failed') from error


def wrap_key(kek: bytes, cek: bytes) -> bytes:
    """RFC 3394 AES key wrap."""
    _check_length('AES key encryption key', kek, AES_KEY_LENGTHS)
    try:
        return keywrap.aes_key_wrap(kek, cek)
    except ValueError as error:
        raise errors.KeyLengthError('Cannot wrap key: {0}'.format(error)) from error


def unwrap_key(kek: bytes, encrypted_key: bytes) -> bytes:
    """RFC 3394 AES key unwrap.

    :raises errors.AuthenticationError: if the integrity check fails

    """
    _check_length('AES key encryption key', kek, AES_KEY_LENGTHS)
    # at least the integrity check block plus two 64-bit blocks
    if len(encrypted_key) < 24 or len(encrypted_key) % 8:
        raise errors.MalformedInputError(
            'Invalid wrapped key length: {0} bytes'.format(len(encrypted_key)))
    try:
        return keywrap.aes_key_unwrap(kek, encrypted_key)
    except keywrap.InvalidUnwrap as error:
        raise errors.AuthenticationError('AES key unwrap integrity check failed') from error
    except ValueError as error:
        raise errors.MalformedInputError('Invalid wrapped key: {0}'.format(error)) from error


def gcm_wrap_key(kek: bytes, iv: bytes, cek: bytes) -> AuthenticatedCipherText:
    """AES GCM key wrap: the CEK encrypted under ``kek``, no AAD."""
    return encrypt_gcm(kek, iv, cek, b'')


def gcm_unwrap_key(kek: bytes, iv: bytes, encrypted_key: bytes, auth_tag: bytes) -> bytes:
    """AES GCM key unwrap.

    :raises errors.AuthenticationError: if the tag does not match

    """
    return decrypt_gcm(kek, iv, encrypted_key, auth_tag, b'')
