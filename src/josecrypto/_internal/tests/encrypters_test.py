"""Tests for josecrypto.encrypters."""
import os
import sys
import unittest
from unittest import mock

from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric import x25519
import pytest

from josecrypto import algorithms
from josecrypto import errors
from josecrypto import header as jose_header
from josecrypto import jwk as jose_jwk
from josecrypto import kdf
from josecrypto._internal.tests import test_util

RSA_KEY = test_util.load_private_key('rsa2048_key.pem')
PLAINTEXT = b'Hello, world!'
ENCRYPTION_METHODS = sorted(algorithms.AES_CBC_HMAC_SHA | algorithms.AES_GCM, key=str)


def _header(alg, enc=algorithms.A128GCM, **kwargs):
    return jose_header.JWEHeader(alg=alg, enc=enc, **kwargs)


def _decrypt(decrypter, parts):
    return decrypter.decrypt(parts.header, parts.encrypted_key, parts.iv,
                             parts.ciphertext, parts.auth_tag)


def _flip_bit(data):
    return bytes([data[0] ^ 1]) + data[1:]


class DirectTest(unittest.TestCase):
    """Tests for josecrypto.encrypters.DirectEncrypter and DirectDecrypter."""

    def test_round_trip(self):
        from josecrypto.encrypters import DirectDecrypter
        from josecrypto.encrypters import DirectEncrypter
        for enc in ENCRYPTION_METHODS:
            key = os.urandom(enc.cek_bit_length // 8)
            parts = DirectEncrypter(key).encrypt(_header(algorithms.DIR, enc), PLAINTEXT)
            assert parts.encrypted_key is None
            assert _decrypt(DirectDecrypter(key), parts) == PLAINTEXT

    def test_flipped_key_bit(self):
        from josecrypto.encrypters import DirectDecrypter
        from josecrypto.encrypters import DirectEncrypter
        key = os.urandom(32)
        parts = DirectEncrypter(key).encrypt(
            _header(algorithms.DIR, algorithms.A128CBC_HS256), PLAINTEXT)
        with pytest.raises(errors.AuthenticationError):
            _decrypt(DirectDecrypter(_flip_bit(key)), parts)

    def test_key_length_mismatch(self):
        from josecrypto.encrypters import DirectEncrypter
        encrypter = DirectEncrypter(os.urandom(16))
        with pytest.raises(errors.KeyLengthError):
            encrypter.encrypt(_header(algorithms.DIR, algorithms.A256GCM), PLAINTEXT)

    def test_bad_key_length(self):
        from josecrypto.encrypters import DirectDecrypter
        from josecrypto.encrypters import DirectEncrypter
        with pytest.raises(errors.KeyLengthError):
            DirectEncrypter(os.urandom(20))
        with pytest.raises(errors.KeyLengthError):
            DirectDecrypter(os.urandom(20))

    def test_unexpected_encrypted_key(self):
        from josecrypto.encrypters import DirectDecrypter
        from josecrypto.encrypters import DirectEncrypter
        key = os.urandom(16)
        parts = DirectEncrypter(key).encrypt(_header(algorithms.DIR), PLAINTEXT)
        with pytest.raises(errors.MalformedInputError):
            DirectDecrypter(key).decrypt(parts.header, b'key', parts.iv,
                                         parts.ciphertext, parts.auth_tag)

    def test_unsupported(self):
        from josecrypto.encrypters import DirectEncrypter
        encrypter = DirectEncrypter(os.urandom(16))
        with pytest.raises(errors.UnsupportedAlgorithmError):
            encrypter.encrypt(_header(algorithms.A128KW), PLAINTEXT)
        with pytest.raises(errors.UnsupportedAlgorithmError):
            encrypter.encrypt(_header(algorithms.DIR, zip='GZIP'), PLAINTEXT)
        with pytest.raises(errors.UnsupportedAlgorithmError):
            encrypter.encrypt(
                _header(algorithms.DIR, algorithms.EncryptionMethod.parse('A128CTR')),
                PLAINTEXT)

    def test_compression(self):
        from josecrypto.encrypters import DirectDecrypter
        from josecrypto.encrypters import DirectEncrypter
        key = os.urandom(16)
        parts = DirectEncrypter(key).encrypt(
            _header(algorithms.DIR, zip='DEF'), PLAINTEXT * 100)
        assert len(parts.ciphertext) < len(PLAINTEXT) * 10
        assert _decrypt(DirectDecrypter(key), parts) == PLAINTEXT * 100
        with pytest.raises(errors.MalformedInputError):
            _decrypt(DirectDecrypter(key, max_decompressed_size=100), parts)

    def test_supported_encryption_methods(self):
        from josecrypto.encrypters import DirectEncrypter
        encrypter = DirectEncrypter(os.urandom(16))
        assert encrypter.supported_algorithms() == frozenset([algorithms.DIR])
        assert encrypter.supported_encryption_methods() == frozenset(ENCRYPTION_METHODS)


class RSATest(unittest.TestCase):
    """Tests for josecrypto.encrypters.RSAEncrypter and RSADecrypter."""

    def test_round_trip(self):
        from josecrypto.encrypters import RSADecrypter
        from josecrypto.encrypters import RSAEncrypter
        encrypter = RSAEncrypter(RSA_KEY.public_key())
        decrypter = RSADecrypter(RSA_KEY)
        for alg in sorted(algorithms.RSA_KEY_ENCRYPTION, key=str):
            for enc in (algorithms.A128CBC_HS256, algorithms.A256GCM):
                parts = encrypter.encrypt(_header(alg, enc), PLAINTEXT)
                assert len(parts.encrypted_key) == 256
                assert _decrypt(decrypter, parts) == PLAINTEXT

    def test_jwk(self):
        from josecrypto.encrypters import RSADecrypter
        from josecrypto.encrypters import RSAEncrypter
        jwk = jose_jwk.RSAKey(key=RSA_KEY, use=jose_jwk.KeyUse.ENCRYPTION)
        parts = RSAEncrypter(jwk.public_key()).encrypt(
            _header(algorithms.RSA_OAEP_256), PLAINTEXT)
        assert _decrypt(RSADecrypter(jwk), parts) == PLAINTEXT
        with pytest.raises(errors.KeyUseError):
            RSADecrypter(jwk.update(use=jose_jwk.KeyUse.SIGNATURE))

    def test_wrong_key_oaep(self):
        from josecrypto.encrypters import RSADecrypter
        from josecrypto.encrypters import RSAEncrypter
        parts = RSAEncrypter(RSA_KEY).encrypt(_header(algorithms.RSA_OAEP), PLAINTEXT)
        other = test_util.load_private_key('rsa2048_key_2.pem')
        with pytest.raises(errors.AuthenticationError):
            _decrypt(RSADecrypter(other), parts)

    def test_wrong_key_rsa1_5(self):
        from josecrypto.encrypters import RSADecrypter
        from josecrypto.encrypters import RSAEncrypter
        parts = RSAEncrypter(RSA_KEY).encrypt(_header(algorithms.RSA1_5), PLAINTEXT)
        other = test_util.load_private_key('rsa2048_key_2.pem')
        with pytest.raises(errors.AuthenticationError):
            _decrypt(RSADecrypter(other), parts)

    def test_cek_too_long_for_key(self):
        from josecrypto.encrypters import RSAEncrypter
        encrypter = RSAEncrypter(test_util.load_private_key('rsa1024_key.pem').public_key(),
                                 allow_weak_key=True)
        with pytest.raises(errors.KeyLengthError):
            encrypter.encrypt(_header(algorithms.RSA_OAEP_256, algorithms.A256CBC_HS512),
                              PLAINTEXT)

    def test_tampered_encrypted_key_rsa1_5(self):
        from josecrypto.encrypters import RSADecrypter
        from josecrypto.encrypters import RSAEncrypter
        parts = RSAEncrypter(RSA_KEY).encrypt(
            _header(algorithms.RSA1_5, algorithms.A128CBC_HS256), PLAINTEXT)
        parts = parts._replace(encrypted_key=_flip_bit(parts.encrypted_key))
        with pytest.raises(errors.AuthenticationError):
            _decrypt(RSADecrypter(RSA_KEY), parts)

    def test_missing_encrypted_key(self):
        from josecrypto.encrypters import RSADecrypter
        from josecrypto.encrypters import RSAEncrypter
        parts = RSAEncrypter(RSA_KEY).encrypt(_header(algorithms.RSA_OAEP_256), PLAINTEXT)
        with pytest.raises(errors.MalformedInputError):
            _decrypt(RSADecrypter(RSA_KEY), parts._replace(encrypted_key=None))

    def test_weak_key(self):
        from josecrypto.encrypters import RSADecrypter
        from josecrypto.encrypters import RSAEncrypter
        weak = test_util.load_private_key('rsa1024_key.pem')
        with pytest.raises(errors.KeyLengthError):
            RSAEncrypter(weak.public_key())
        with pytest.raises(errors.KeyLengthError):
            RSADecrypter(weak)
        parts = RSAEncrypter(weak, allow_weak_key=True).encrypt(
            _header(algorithms.RSA_OAEP), PLAINTEXT)
        assert _decrypt(RSADecrypter(weak, allow_weak_key=True), parts) == PLAINTEXT


class AESTest(unittest.TestCase):
    """Tests for josecrypto.encrypters.AESEncrypter and AESDecrypter."""

    def test_round_trip(self):
        from josecrypto.encrypters import AESDecrypter
        from josecrypto.encrypters import AESEncrypter
        for alg, length in ((algorithms.A128KW, 16), (algorithms.A192KW, 24),
                            (algorithms.A256KW, 32), (algorithms.A128GCMKW, 16),
                            (algorithms.A192GCMKW, 24), (algorithms.A256GCMKW, 32)):
            key = os.urandom(length)
            for enc in ENCRYPTION_METHODS:
                parts = AESEncrypter(key).encrypt(_header(alg, enc), PLAINTEXT)
                assert _decrypt(AESDecrypter(key), parts) == PLAINTEXT

    def test_gcm_key_wrap_header(self):
        from josecrypto.encrypters import AESEncrypter
        header = _header(algorithms.A128GCMKW)
        parts = AESEncrypter(os.urandom(16)).encrypt(header, PLAINTEXT)
        assert len(parts.header.iv) == 12
        assert len(parts.header.tag) == 16
        assert header.iv is None

    def test_gcm_key_wrap_missing_tag(self):
        from josecrypto.encrypters import AESDecrypter
        from josecrypto.encrypters import AESEncrypter
        key = os.urandom(16)
        parts = AESEncrypter(key).encrypt(_header(algorithms.A128GCMKW), PLAINTEXT)
        parts = parts._replace(header=parts.header.update(tag=None))
        with pytest.raises(errors.MalformedInputError):
            _decrypt(AESDecrypter(key), parts)

    def test_key_length_selects_algorithms(self):
        from josecrypto.encrypters import AESEncrypter
        encrypter = AESEncrypter(os.urandom(24))
        assert encrypter.supported_algorithms() == frozenset(
            [algorithms.A192KW, algorithms.A192GCMKW])
        with pytest.raises(errors.UnsupportedAlgorithmError):
            encrypter.encrypt(_header(algorithms.A128KW), PLAINTEXT)
        with pytest.raises(errors.KeyLengthError):
            AESEncrypter(os.urandom(20))

    def test_tampered_encrypted_key(self):
        from josecrypto.encrypters import AESDecrypter
        from josecrypto.encrypters import AESEncrypter
        key = os.urandom(16)
        for alg in (algorithms.A128KW, algorithms.A128GCMKW):
            parts = AESEncrypter(key).encrypt(_header(alg), PLAINTEXT)
            parts = parts._replace(encrypted_key=_flip_bit(parts.encrypted_key))
            with pytest.raises(errors.AuthenticationError):
                _decrypt(AESDecrypter(key), parts)

    def test_wrong_key(self):
        from josecrypto.encrypters import AESDecrypter
        from josecrypto.encrypters import AESEncrypter
        parts = AESEncrypter(os.urandom(32)).encrypt(_header(algorithms.A256KW), PLAINTEXT)
        with pytest.raises(errors.AuthenticationError):
            _decrypt(AESDecrypter(os.urandom(32)), parts)

    def test_octet_sequence_key(self):
        from josecrypto.encrypters import AESDecrypter
        from josecrypto.encrypters import AESEncrypter
        jwk = jose_jwk.OctetSequenceKey(key=os.urandom(16))
        parts = AESEncrypter(jwk).encrypt(_header(algorithms.A128KW), PLAINTEXT)
        assert _decrypt(AESDecrypter(jwk, max_decompressed_size=10), parts) == PLAINTEXT


class ECDHTest(unittest.TestCase):
    """Tests for josecrypto.encrypters.ECDHEncrypter and ECDHDecrypter."""

    def test_round_trip(self):
        from josecrypto.encrypters import ECDHDecrypter
        from josecrypto.encrypters import ECDHEncrypter
        keys = [test_util.load_private_key(name) for name in (
            'ec_p256_key.pem', 'ec_p384_key.pem', 'ec_p521_key.pem')]
        keys.append(x25519.X25519PrivateKey.generate())
        for key in keys:
            for alg in sorted(algorithms.ECDH_ES_FAMILY, key=str):
                for enc in (algorithms.A128CBC_HS256, algorithms.A256GCM):
                    parts = ECDHEncrypter(key.public_key()).encrypt(_header(alg, enc), PLAINTEXT)
                    assert not parts.header.epk.is_private
                    assert _decrypt(ECDHDecrypter(key), parts) == PLAINTEXT

    def test_direct_has_no_encrypted_key(self):
        from josecrypto.encrypters import ECDHDecrypter
        from josecrypto.encrypters import ECDHEncrypter
        key = test_util.load_jwk('ec_p256_key.pem')
        parts = ECDHEncrypter(key.public_key()).encrypt(
            _header(algorithms.ECDH_ES, apu=b'Alice', apv=b'Bob'), PLAINTEXT)
        assert parts.encrypted_key is None
        assert isinstance(parts.header.epk, jose_jwk.ECKey)
        assert parts.header.epk.curve is algorithms.P_256
        with pytest.raises(errors.MalformedInputError):
            _decrypt(ECDHDecrypter(key), parts._replace(encrypted_key=b'key'))

    def test_party_info_is_bound(self):
        from josecrypto.encrypters import ECDHDecrypter
        from josecrypto.encrypters import ECDHEncrypter
        key = test_util.load_private_key('ec_p256_key.pem')
        parts = ECDHEncrypter(key.public_key()).encrypt(
            _header(algorithms.ECDH_ES_A128KW, apu=b'Alice'), PLAINTEXT)
        # the header is the AAD, so the content check fails too
        parts = parts._replace(header=parts.header.update(apu=b'Mallory'))
        with pytest.raises(errors.AuthenticationError):
            _decrypt(ECDHDecrypter(key), parts)

    def test_epk_checks(self):
        from josecrypto.encrypters import ECDHDecrypter
        from josecrypto.encrypters import ECDHEncrypter
        key = test_util.load_private_key('ec_p256_key.pem')
        decrypter = ECDHDecrypter(key)
        parts = ECDHEncrypter(key.public_key()).encrypt(_header(algorithms.ECDH_ES), PLAINTEXT)
        for epk in (None,
                    jose_jwk.ECKey(key=test_util.load_private_key('ec_p384_key.pem')
                                   .public_key()),
                    jose_jwk.ECKey(key=ec.generate_private_key(ec.SECP256R1())),
                    jose_jwk.OctetSequenceKey(key=b'foo')):
            with pytest.raises(errors.MalformedInputError):
                _decrypt(decrypter, parts._replace(header=parts.header.update(epk=epk)))

    def test_encrypted_key_checked_before_key_agreement(self):
        from josecrypto.encrypters import ECDHDecrypter
        from josecrypto.encrypters import ECDHEncrypter
        key = test_util.load_private_key('ec_p256_key.pem')
        decrypter = ECDHDecrypter(key)
        direct = ECDHEncrypter(key.public_key()).encrypt(_header(algorithms.ECDH_ES), PLAINTEXT)
        wrapped = ECDHEncrypter(key.public_key()).encrypt(
            _header(algorithms.ECDH_ES_A128KW), PLAINTEXT)
        with mock.patch.object(kdf, 'derive_shared_secret',
                               wraps=kdf.derive_shared_secret) as derive:
            with pytest.raises(errors.MalformedInputError):
                _decrypt(decrypter, direct._replace(encrypted_key=b'key'))
            with pytest.raises(errors.MalformedInputError):
                _decrypt(decrypter, wrapped._replace(encrypted_key=None))
        assert derive.call_count == 0

    def test_unsupported_curve(self):
        from josecrypto.encrypters import ECDHEncrypter
        with pytest.raises(errors.UnsupportedAlgorithmError):
            ECDHEncrypter(ec.generate_private_key(ec.SECP256K1()).public_key())

    def test_ed25519_rejected(self):
        from josecrypto.encrypters import ECDHEncrypter
        with pytest.raises(errors.MalformedInputError):
            ECDHEncrypter(test_util.load_jwk('ed25519_key.pem'))


class PasswordBasedTest(unittest.TestCase):
    """Tests for josecrypto.encrypters.PasswordBasedEncrypter and PasswordBasedDecrypter."""

    password = 'Thus from my lips, by yours, my sin is purged.'

    def test_round_trip(self):
        from josecrypto.encrypters import PasswordBasedDecrypter
        from josecrypto.encrypters import PasswordBasedEncrypter
        encrypter = PasswordBasedEncrypter(self.password, iteration_count=1000)
        for alg in sorted(algorithms.PBES2, key=str):
            parts = encrypter.encrypt(_header(alg, algorithms.A128CBC_HS256), PLAINTEXT)
            assert parts.header.p2c == 1000
            assert len(parts.header.p2s) == 16
            assert _decrypt(PasswordBasedDecrypter(self.password), parts) == PLAINTEXT

    def test_wrong_password(self):
        from josecrypto.encrypters import PasswordBasedDecrypter
        from josecrypto.encrypters import PasswordBasedEncrypter
        parts = PasswordBasedEncrypter(self.password, iteration_count=1000).encrypt(
            _header(algorithms.PBES2_HS256_A128KW), PLAINTEXT)
        with pytest.raises(errors.AuthenticationError):
            _decrypt(PasswordBasedDecrypter(b'password'), parts)

    def test_encrypter_parameters(self):
        from josecrypto.encrypters import PasswordBasedEncrypter
        with pytest.raises(errors.MalformedInputError):
            PasswordBasedEncrypter(self.password, salt_length=7)
        with pytest.raises(errors.MalformedInputError):
            PasswordBasedEncrypter(self.password, iteration_count=999)
        with pytest.raises(errors.MalformedInputError):
            PasswordBasedEncrypter(b'')

    def test_header_parameters(self):
        from josecrypto.encrypters import PasswordBasedDecrypter
        from josecrypto.encrypters import PasswordBasedEncrypter
        parts = PasswordBasedEncrypter(self.password, iteration_count=1000).encrypt(
            _header(algorithms.PBES2_HS256_A128KW), PLAINTEXT)
        decrypter = PasswordBasedDecrypter(self.password, max_iteration_count=999)
        with pytest.raises(errors.MalformedInputError):
            _decrypt(decrypter, parts)
        decrypter = PasswordBasedDecrypter(self.password)
        for changes in ({'p2s': b'1234567'}, {'p2s': None}, {'p2c': None}):
            with pytest.raises(errors.MalformedInputError):
                _decrypt(decrypter, parts._replace(header=parts.header.update(**changes)))

    def test_encrypted_key_checked_before_key_derivation(self):
        from josecrypto.encrypters import PasswordBasedDecrypter
        from josecrypto.encrypters import PasswordBasedEncrypter
        parts = PasswordBasedEncrypter(self.password, iteration_count=1000).encrypt(
            _header(algorithms.PBES2_HS256_A128KW), PLAINTEXT)
        parts = parts._replace(header=parts.header.update(p2c=1000000), encrypted_key=None)
        with mock.patch.object(kdf, 'derive_pbes2_key', wraps=kdf.derive_pbes2_key) as derive:
            with pytest.raises(errors.MalformedInputError):
                _decrypt(PasswordBasedDecrypter(self.password), parts)
        assert derive.call_count == 0


class FactoryTest(unittest.TestCase):
    """Tests for josecrypto.encrypters.encrypter_for and decrypter_for."""

    def test_dispatch(self):
        from josecrypto import encrypters
        rsa_jwk = test_util.load_jwk('rsa2048_key.pem')
        ec_jwk = test_util.load_jwk('ec_p256_key.pem')
        secret = jose_jwk.OctetSequenceKey(key=os.urandom(16))
        for key, alg, encrypter_cls, decrypter_cls in (
                (secret, algorithms.DIR, encrypters.DirectEncrypter,
                 encrypters.DirectDecrypter),
                (rsa_jwk, algorithms.RSA_OAEP, encrypters.RSAEncrypter,
                 encrypters.RSADecrypter),
                (secret, algorithms.A128GCMKW, encrypters.AESEncrypter,
                 encrypters.AESDecrypter),
                (ec_jwk, algorithms.ECDH_ES_A256KW, encrypters.ECDHEncrypter,
                 encrypters.ECDHDecrypter),
                (secret, algorithms.PBES2_HS256_A128KW, encrypters.PasswordBasedEncrypter,
                 encrypters.PasswordBasedDecrypter)):
            assert isinstance(encrypters.encrypter_for(key, alg), encrypter_cls)
            assert isinstance(encrypters.decrypter_for(key, alg), decrypter_cls)

    def test_unknown_algorithm(self):
        from josecrypto import encrypters
        with pytest.raises(errors.UnsupportedAlgorithmError):
            encrypters.encrypter_for(jose_jwk.OctetSequenceKey(key=b'foo'),
                                     algorithms.JWEAlgorithm.parse('A128KW-X'))


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
