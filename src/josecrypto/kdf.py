"""Key derivation: ECDH-ES (Concat KDF) and PBES2 (PBKDF2).

https://tools.ietf.org/html/rfc7518#section-4.6
https://tools.ietf.org/html/rfc7518#section-4.8

"""
import struct
from typing import Any

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric import x25519
from cryptography.hazmat.primitives.kdf.concatkdf import ConcatKDFHash
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from josecrypto import algorithms
from josecrypto import errors
from josecrypto import header as jose_header

ECDH_KW_KEY_LENGTHS = {
    algorithms.ECDH_ES_A128KW: 16,
    algorithms.ECDH_ES_A192KW: 24,
    algorithms.ECDH_ES_A256KW: 32,
}
"""Derived key encryption key length (bytes) for ECDH-ES with key wrap."""

PBES2_PARAMETERS = {
    algorithms.PBES2_HS256_A128KW: (hashes.SHA256, 16),
    algorithms.PBES2_HS384_A192KW: (hashes.SHA384, 24),
    algorithms.PBES2_HS512_A256KW: (hashes.SHA512, 32),
}
"""PRF hash and derived key length (bytes) per PBES2 algorithm."""


def _length_prefixed(data: bytes) -> bytes:
    return struct.pack('>I', len(data)) + data


def concat_kdf(shared_secret: bytes, key_length: int, algorithm_id: str,
               party_u_info: bytes = b'', party_v_info: bytes = b'') -> bytes:
    """Concat KDF with SHA-256 (NIST SP 800-56A, single-step).

    :param int key_length: Derived key length in bytes.

    """
    other_info = b''.join((
        _length_prefixed(algorithm_id.encode('ascii')),
        _length_prefixed(party_u_info),
        _length_prefixed(party_v_info),
        struct.pack('>I', key_length * 8),  # SuppPubInfo
    ))
    return ConcatKDFHash(
        algorithm=hashes.SHA256(), length=key_length, otherinfo=other_info,
    ).derive(shared_secret)


def derive_shared_secret(private_key: Any, public_key: Any) -> bytes:
    """ECDH shared secret ``Z``.

    Both keys must be on the same curve, either NIST curves or X25519.

    :raises errors.MalformedInputError: if the keys do not match

    """
    if isinstance(private_key, ec.EllipticCurvePrivateKey):
        if (not isinstance(public_key, ec.EllipticCurvePublicKey) or
                public_key.curve.name != private_key.curve.name):
            raise errors.MalformedInputError(
                'Public key is not on the curve of the private key')
        return private_key.exchange(ec.ECDH(), public_key)
    if isinstance(private_key, x25519.X25519PrivateKey):
        if not isinstance(public_key, x25519.X25519PublicKey):
            raise errors.MalformedInputError('Public key is not an X25519 key')
        try:
            return private_key.exchange(public_key)
        except ValueError as error:  # all-zero shared secret
            raise errors.MalformedInputError(str(error)) from error
    raise errors.MalformedInputError(
        'Unsupported key agreement key: {0}'.format(private_key.__class__.__name__))


def derive_ecdh_key(header: jose_header.JWEHeader, shared_secret: bytes) -> bytes:
    """Derive the CEK (ECDH-ES) or the key encryption key (ECDH-ES+AxxxKW)."""
    if header.alg == algorithms.ECDH_ES:
        algorithm_id = header.enc.name
        key_length = header.enc.cek_bit_length // 8
    else:
        algorithm_id = header.alg.name
        key_length = ECDH_KW_KEY_LENGTHS[header.alg]
    return concat_kdf(shared_secret, key_length, algorithm_id,
                      header.apu or b'', header.apv or b'')


def pbes2_salt(alg: algorithms.Algorithm, salt_input: bytes) -> bytes:
    """``UTF8(alg) || 0x00 || p2s``"""
    return alg.name.encode('utf-8') + b'\x00' + salt_input


def derive_pbes2_key(password: bytes, alg: algorithms.Algorithm, salt_input: bytes,
                     iterations: int) -> bytes:
    """PBKDF2 key encryption key for a PBES2 algorithm."""
    hash_cls, key_length = PBES2_PARAMETERS[alg]
    return PBKDF2HMAC(
        algorithm=hash_cls(), length=key_length, salt=pbes2_salt(alg, salt_input),
        iterations=iterations,
    ).derive(password)
