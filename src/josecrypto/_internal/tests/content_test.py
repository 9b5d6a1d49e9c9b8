"""Tests for josecrypto.content."""
import os
import sys
import unittest

import pytest

from josecrypto import algorithms
from josecrypto import errors
from josecrypto import header as jose_header


class ContentEncryptionTest(unittest.TestCase):
    """Tests for josecrypto.content."""

    def test_generate_cek(self):
        from josecrypto.content import generate_cek
        assert len(generate_cek(algorithms.A128GCM)) == 16
        assert len(generate_cek(algorithms.A192CBC_HS384)) == 48
        assert len(generate_cek(algorithms.A256CBC_HS512)) == 64

    def test_compute_aad(self):
        from josecrypto.content import compute_aad
        header = jose_header.JWEHeader(alg=algorithms.DIR, enc=algorithms.A128GCM)
        assert compute_aad(header) == header.to_base64().encode('ascii')

    def test_round_trip(self):
        from josecrypto.content import decrypt
        from josecrypto.content import encrypt
        from josecrypto.content import generate_cek
        for enc in sorted(algorithms.AES_CBC_HMAC_SHA | algorithms.AES_GCM,
                          key=lambda method: method.name):
            header = jose_header.JWEHeader(alg=algorithms.DIR, enc=enc)
            cek = generate_cek(enc)
            parts = encrypt(header, b'Hello, world!', cek, None)
            assert parts.header is header
            assert parts.encrypted_key is None
            assert decrypt(header, parts.iv, parts.ciphertext, parts.auth_tag, cek) == \
                b'Hello, world!'

    def test_iv_lengths(self):
        from josecrypto.content import encrypt
        from josecrypto.content import generate_cek
        header = jose_header.JWEHeader(alg=algorithms.DIR, enc=algorithms.A128GCM)
        assert len(encrypt(header, b'', generate_cek(header.enc), None).iv) == 12
        header = header.update(enc=algorithms.A128CBC_HS256)
        assert len(encrypt(header, b'', generate_cek(header.enc), None).iv) == 16

    def test_header_is_authenticated(self):
        from josecrypto.content import decrypt
        from josecrypto.content import encrypt
        cek = os.urandom(16)
        header = jose_header.JWEHeader(alg=algorithms.DIR, enc=algorithms.A128GCM)
        parts = encrypt(header, b'foo', cek, None)
        with pytest.raises(errors.AuthenticationError):
            decrypt(header.update(kid='other'), parts.iv, parts.ciphertext,
                    parts.auth_tag, cek)

    def test_compressed(self):
        from josecrypto.content import decrypt
        from josecrypto.content import encrypt
        cek = os.urandom(32)
        header = jose_header.JWEHeader(
            alg=algorithms.DIR, enc=algorithms.A128CBC_HS256, zip='DEF')
        plaintext = b'a' * 1000
        parts = encrypt(header, plaintext, cek, None)
        assert len(parts.ciphertext) < 100
        assert decrypt(header, parts.iv, parts.ciphertext, parts.auth_tag, cek) == plaintext
        with pytest.raises(errors.MalformedInputError):
            decrypt(header, parts.iv, parts.ciphertext, parts.auth_tag, cek,
                    max_decompressed_size=999)

    def test_wrong_cek_length(self):
        from josecrypto.content import decrypt
        from josecrypto.content import encrypt
        header = jose_header.JWEHeader(alg=algorithms.DIR, enc=algorithms.A256GCM)
        with pytest.raises(errors.KeyLengthError):
            encrypt(header, b'foo', os.urandom(16), None)
        with pytest.raises(errors.KeyLengthError):
            decrypt(header, os.urandom(12), b'foo', os.urandom(16), os.urandom(16))

    def test_missing_iv_or_tag(self):
        from josecrypto.content import decrypt
        header = jose_header.JWEHeader(alg=algorithms.DIR, enc=algorithms.A128GCM)
        with pytest.raises(errors.MalformedInputError):
            decrypt(header, None, b'foo', os.urandom(16), os.urandom(16))
        with pytest.raises(errors.MalformedInputError):
            decrypt(header, os.urandom(12), b'foo', None, os.urandom(16))


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
