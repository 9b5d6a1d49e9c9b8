"""JWE encrypters and decrypters.

Each pair implements one key management family: it produces (or
recovers) the CEK and hands over to :mod:`josecrypto.content`.

https://tools.ietf.org/html/rfc7518#section-4

"""
import logging
import os
from typing import Any
from typing import Iterable
from typing import Optional

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric import x25519

from josecrypto import aes
from josecrypto import algorithms
from josecrypto import constants
from josecrypto import content
from josecrypto import crit
from josecrypto import deflate
from josecrypto import errors
from josecrypto import header as jose_header
from josecrypto import interfaces
from josecrypto import jwk as jose_jwk
from josecrypto import kdf
from josecrypto import support

logger = logging.getLogger(__name__)

_ENC = jose_jwk.KeyUse.ENCRYPTION
_KIND = 'JWE algorithm'

RSA_PADDINGS = {
    algorithms.RSA1_5: padding.PKCS1v15,
    algorithms.RSA_OAEP: lambda: padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA1()), algorithm=hashes.SHA1(), label=None),
    algorithms.RSA_OAEP_256: lambda: padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()), algorithm=hashes.SHA256(), label=None),
}
"""RSA encryption padding factory per algorithm."""

AES_KEY_LENGTHS = {
    algorithms.A128KW: 16,
    algorithms.A192KW: 24,
    algorithms.A256KW: 32,
    algorithms.A128GCMKW: 16,
    algorithms.A192GCMKW: 24,
    algorithms.A256GCMKW: 32,
}
"""Key encryption key length (bytes) per AES key wrap algorithm."""

support.check_dispatch_table(RSA_PADDINGS, algorithms.RSA_KEY_ENCRYPTION, 'RSA')
support.check_dispatch_table(
    AES_KEY_LENGTHS, algorithms.AES_KW | algorithms.AES_GCM_KW, 'AES key wrap')
support.check_dispatch_table(
    kdf.ECDH_KW_KEY_LENGTHS, algorithms.ECDH_ES_FAMILY - {algorithms.ECDH_ES}, 'ECDH-ES')
support.check_dispatch_table(kdf.PBES2_PARAMETERS, algorithms.PBES2, 'PBES2')

ECDH_CURVES = frozenset([algorithms.P_256, algorithms.P_384, algorithms.P_521,
                         algorithms.X25519])
"""Curves supported for ECDH-ES key agreement."""


class _Provider:
    # pylint: disable=too-few-public-methods

    def __init__(self, deferred_critical_params: Optional[Iterable[str]] = None) -> None:
        self.critical_params = crit.CriticalHeaderParamsDeferral(
            deferred=deferred_critical_params)

    def _check(self, header: jose_header.JWEHeader):
        alg = support.check_header(
            header, self.supported_algorithms(), self.critical_params, _KIND)
        enc = support.ensure_encryption_method(
            header.enc, self.supported_encryption_methods())
        deflate.check_zip(header.zip)
        return alg, enc


class _Decrypter(_Provider):
    # pylint: disable=too-few-public-methods

    def __init__(self, deferred_critical_params=None,
                 max_decompressed_size: int = constants.MAX_DECOMPRESSED_SIZE) -> None:
        super().__init__(deferred_critical_params)
        self.max_decompressed_size = max_decompressed_size

    def _decrypt_content(self, header, iv, ciphertext, auth_tag, cek):
        return content.decrypt(header, iv, ciphertext, auth_tag, cek,
                               self.max_decompressed_size)


def _require_encrypted_key(encrypted_key: Optional[bytes]) -> bytes:
    if not encrypted_key:
        raise errors.MalformedInputError('Missing JWE encrypted key')
    return encrypted_key


class DirectEncrypter(_Provider, interfaces.JWEEncrypter):
    """Direct encryption with a shared symmetric key (``dir``).

    The key is the CEK, so its length selects the usable encryption
    methods.

    """
    SUPPORTED_ALGORITHMS = frozenset([algorithms.DIR])

    def __init__(self, key, deferred_critical_params=None):
        super().__init__(deferred_critical_params)
        self.key = support.secret_bytes(key, _ENC)
        if len(self.key) not in constants.DIRECT_KEY_LENGTHS:
            raise errors.KeyLengthError(
                'The key length must be one of {0} bytes, got {1}'.format(
                    constants.DIRECT_KEY_LENGTHS, len(self.key)))

    def encrypt(self, header, plaintext):
        _, enc = self._check(header)
        content.check_cek(enc, self.key)
        return content.encrypt(header, plaintext, self.key, None)


class DirectDecrypter(_Decrypter, interfaces.JWEDecrypter):
    """Direct decryption with a shared symmetric key (``dir``)."""
    SUPPORTED_ALGORITHMS = frozenset([algorithms.DIR])

    def __init__(self, key, deferred_critical_params=None,
                 max_decompressed_size=constants.MAX_DECOMPRESSED_SIZE):
        super().__init__(deferred_critical_params, max_decompressed_size)
        self.key = support.secret_bytes(key, _ENC)
        if len(self.key) not in constants.DIRECT_KEY_LENGTHS:
            raise errors.KeyLengthError(
                'The key length must be one of {0} bytes, got {1}'.format(
                    constants.DIRECT_KEY_LENGTHS, len(self.key)))

    def decrypt(self, header, encrypted_key, iv, ciphertext, auth_tag):
        _, enc = self._check(header)
        if encrypted_key:
            raise errors.MalformedInputError(
                'Unexpected JWE encrypted key with direct encryption')
        content.check_cek(enc, self.key)
        return self._decrypt_content(header, iv, ciphertext, auth_tag, self.key)


def _check_rsa_key_size(key: Any, allow_weak_key: bool) -> None:
    if key.key_size < constants.MIN_RSA_KEY_SIZE and not allow_weak_key:
        raise errors.KeyLengthError('The RSA key size must be at least {0} bits'.format(
            constants.MIN_RSA_KEY_SIZE))


class RSAEncrypter(_Provider, interfaces.JWEEncrypter):
    """RSA key encryption (RSA1_5, RSA-OAEP, RSA-OAEP-256).

    :param key: :class:`~josecrypto.jwk.RSAKey` or `cryptography` RSA
        public key.

    """
    SUPPORTED_ALGORITHMS = algorithms.RSA_KEY_ENCRYPTION

    def __init__(self, key, allow_weak_key=False, deferred_critical_params=None):
        super().__init__(deferred_critical_params)
        key = support.unwrap_key(
            key, jose_jwk.RSAKey, (rsa.RSAPublicKey, rsa.RSAPrivateKey), _ENC)
        self.key = key.public_key() if isinstance(key, rsa.RSAPrivateKey) else key
        _check_rsa_key_size(self.key, allow_weak_key)

    def encrypt(self, header, plaintext):
        alg, enc = self._check(header)
        cek = content.generate_cek(enc)
        try:
            encrypted_key = self.key.encrypt(cek, RSA_PADDINGS[alg]())
        except ValueError as error:
            raise errors.KeyLengthError(
                'The {0}-bit RSA key is too short for {1} with {2}'.format(
                    self.key.key_size, alg, enc)) from error
        return content.encrypt(header, plaintext, cek, encrypted_key)


class RSADecrypter(_Decrypter, interfaces.JWEDecrypter):
    """RSA key decryption (RSA1_5, RSA-OAEP, RSA-OAEP-256).

    For RSA1_5 a failed key decryption is not reported: a random CEK is
    used instead and content authentication fails as it would with a
    wrong key.

    """
    SUPPORTED_ALGORITHMS = algorithms.RSA_KEY_ENCRYPTION

    def __init__(self, key, allow_weak_key=False, deferred_critical_params=None,
                 max_decompressed_size=constants.MAX_DECOMPRESSED_SIZE):
        super().__init__(deferred_critical_params, max_decompressed_size)
        self.key = support.unwrap_key(key, jose_jwk.RSAKey, (rsa.RSAPrivateKey,), _ENC)
        _check_rsa_key_size(self.key, allow_weak_key)

    def decrypt(self, header, encrypted_key, iv, ciphertext, auth_tag):
        alg, enc = self._check(header)
        encrypted_key = _require_encrypted_key(encrypted_key)
        if alg == algorithms.RSA1_5:
            cek = self._decrypt_rsa1_5(enc, encrypted_key)
        else:
            try:
                cek = self.key.decrypt(encrypted_key, RSA_PADDINGS[alg]())
            except ValueError as error:
                raise errors.AuthenticationError('RSA key decryption failed') from error
        return self._decrypt_content(header, iv, ciphertext, auth_tag, cek)

    def _decrypt_rsa1_5(self, enc, encrypted_key):
        # RFC 7516, section 11.5
        random_cek = content.generate_cek(enc)
        try:
            cek = self.key.decrypt(encrypted_key, padding.PKCS1v15())
        except ValueError:
            logger.debug('RSA1_5 key decryption failed', exc_info=True)
            cek = random_cek
        if len(cek) != len(random_cek):
            cek = random_cek
        return cek


class _AESProvider(_Provider):

    SUPPORTED_ALGORITHMS = algorithms.AES_KW | algorithms.AES_GCM_KW

    def __init__(self, key, deferred_critical_params=None):
        super().__init__(deferred_critical_params)
        self.key = support.secret_bytes(key, _ENC)
        if len(self.key) not in aes.AES_KEY_LENGTHS:
            raise errors.KeyLengthError(
                'The key encryption key must be 128, 192 or 256 bits, got {0}'.format(
                    len(self.key) * 8))

    def supported_algorithms(self):
        """AES key wrap algorithms matching the key length."""
        return frozenset(alg for alg, length in AES_KEY_LENGTHS.items()
                         if length == len(self.key))


class AESEncrypter(_AESProvider, interfaces.JWEEncrypter):
    """AES key wrap (A128KW...) and AES GCM key wrap (A128GCMKW...).

    GCM key wrap adds the ``iv`` and ``tag`` header parameters.

    """

    def encrypt(self, header, plaintext):
        alg, enc = self._check(header)
        cek = content.generate_cek(enc)
        if alg in algorithms.AES_KW:
            encrypted_key = aes.wrap_key(self.key, cek)
        else:
            iv = os.urandom(constants.GCM_IV_LENGTH)
            encrypted_key, tag = aes.gcm_wrap_key(self.key, iv, cek)
            header = header.update(iv=iv, tag=tag)
        return content.encrypt(header, plaintext, cek, encrypted_key)


class AESDecrypter(_AESProvider, _Decrypter, interfaces.JWEDecrypter):
    """AES key unwrap (A128KW...) and AES GCM key unwrap (A128GCMKW...)."""

    def __init__(self, key, deferred_critical_params=None,
                 max_decompressed_size=constants.MAX_DECOMPRESSED_SIZE):
        super().__init__(key, deferred_critical_params)
        self.max_decompressed_size = max_decompressed_size

    def decrypt(self, header, encrypted_key, iv, ciphertext, auth_tag):
        alg, _ = self._check(header)
        encrypted_key = _require_encrypted_key(encrypted_key)
        if alg in algorithms.AES_KW:
            cek = aes.unwrap_key(self.key, encrypted_key)
        else:
            if header.iv is None or header.tag is None:
                raise errors.MalformedInputError(
                    'Missing "iv" or "tag" header parameter for {0}'.format(alg))
            cek = aes.gcm_unwrap_key(self.key, header.iv, encrypted_key, header.tag)
        return self._decrypt_content(header, iv, ciphertext, auth_tag, cek)


def _ecdh_curve(key: Any) -> algorithms.Curve:
    if isinstance(key, (x25519.X25519PublicKey, x25519.X25519PrivateKey)):
        curve = algorithms.X25519
    else:
        curve = algorithms.Curve.for_std_name(key.curve.name)
    return support.ensure_curve(curve, ECDH_CURVES)


def _ecdh_public_jwk(key: Any) -> jose_jwk.JWK:
    if isinstance(key, x25519.X25519PublicKey):
        return jose_jwk.OctetKeyPair(key=key)
    return jose_jwk.ECKey(key=key)


_ECDH_PUBLIC_KEY_TYPES = (ec.EllipticCurvePublicKey, ec.EllipticCurvePrivateKey,
                          x25519.X25519PublicKey, x25519.X25519PrivateKey)


def _unwrap_ecdh_key(key: Any, key_types) -> Any:
    jwk_cls = jose_jwk.OctetKeyPair if isinstance(key, jose_jwk.OctetKeyPair) else jose_jwk.ECKey
    return support.unwrap_key(key, jwk_cls, key_types, _ENC)


class ECDHEncrypter(_Provider, interfaces.JWEEncrypter):
    """ECDH-ES key agreement, direct (ECDH-ES) or with AES key wrap.

    A fresh ephemeral key pair is generated for every message and its
    public part added to the header as ``epk``.

    :param key: Recipient public key, :class:`~josecrypto.jwk.ECKey`,
        X25519 :class:`~josecrypto.jwk.OctetKeyPair` or `cryptography`
        EC/X25519 public key.

    """
    SUPPORTED_ALGORITHMS = algorithms.ECDH_ES_FAMILY
    SUPPORTED_ELLIPTIC_CURVES = ECDH_CURVES

    def __init__(self, key, deferred_critical_params=None):
        super().__init__(deferred_critical_params)
        key = _unwrap_ecdh_key(key, _ECDH_PUBLIC_KEY_TYPES)
        if isinstance(key, (ec.EllipticCurvePrivateKey, x25519.X25519PrivateKey)):
            key = key.public_key()
        self.key = key
        self.curve = _ecdh_curve(key)

    def _generate_ephemeral_key(self):
        if self.curve == algorithms.X25519:
            return x25519.X25519PrivateKey.generate()
        return ec.generate_private_key(self.curve.crypto_curve())

    def encrypt(self, header, plaintext):
        alg, enc = self._check(header)
        ephemeral = self._generate_ephemeral_key()
        header = header.update(epk=_ecdh_public_jwk(ephemeral.public_key()))
        derived = kdf.derive_ecdh_key(header, kdf.derive_shared_secret(ephemeral, self.key))
        if alg == algorithms.ECDH_ES:
            return content.encrypt(header, plaintext, derived, None)
        cek = content.generate_cek(enc)
        return content.encrypt(header, plaintext, cek, aes.wrap_key(derived, cek))


class ECDHDecrypter(_Decrypter, interfaces.JWEDecrypter):
    """ECDH-ES key agreement, direct (ECDH-ES) or with AES key unwrap.

    The ``epk`` header parameter must be on the curve of the private key.

    """
    SUPPORTED_ALGORITHMS = algorithms.ECDH_ES_FAMILY
    SUPPORTED_ELLIPTIC_CURVES = ECDH_CURVES

    def __init__(self, key, deferred_critical_params=None,
                 max_decompressed_size=constants.MAX_DECOMPRESSED_SIZE):
        super().__init__(deferred_critical_params, max_decompressed_size)
        self.key = _unwrap_ecdh_key(
            key, (ec.EllipticCurvePrivateKey, x25519.X25519PrivateKey))
        self.curve = _ecdh_curve(self.key)

    def _ephemeral_public_key(self, header):
        if header.epk is None:
            raise errors.MalformedInputError('Missing "epk" header parameter')
        if (not isinstance(header.epk, (jose_jwk.ECKey, jose_jwk.OctetKeyPair)) or
                header.epk.is_private or header.epk.curve != self.curve):
            raise errors.MalformedInputError(
                'The ephemeral public key must be a public {0} key'.format(self.curve))
        return header.epk.cryptography_key

    def decrypt(self, header, encrypted_key, iv, ciphertext, auth_tag):
        alg, _ = self._check(header)
        if alg == algorithms.ECDH_ES:
            if encrypted_key:
                raise errors.MalformedInputError(
                    'Unexpected JWE encrypted key with ECDH-ES direct key agreement')
        else:
            encrypted_key = _require_encrypted_key(encrypted_key)
        shared_secret = kdf.derive_shared_secret(self.key, self._ephemeral_public_key(header))
        derived = kdf.derive_ecdh_key(header, shared_secret)
        if alg == algorithms.ECDH_ES:
            cek = derived
        else:
            cek = aes.unwrap_key(derived, encrypted_key)
        return self._decrypt_content(header, iv, ciphertext, auth_tag, cek)


def _password_bytes(password) -> bytes:
    if isinstance(password, str):
        return password.encode('utf-8')
    if not isinstance(password, bytes) or not password:
        raise errors.MalformedInputError('The password must be non-empty bytes or text')
    return password


class PasswordBasedEncrypter(_Provider, interfaces.JWEEncrypter):
    """PBES2 encrypter (PBES2-HS256+A128KW...).

    :param int salt_length: Length of the random ``p2s`` salt input.
    :param int iteration_count: PBKDF2 iterations, written to ``p2c``.

    """
    SUPPORTED_ALGORITHMS = algorithms.PBES2

    def __init__(self, password, salt_length=constants.PBES2_DEFAULT_SALT_LENGTH,
                 iteration_count=constants.PBES2_DEFAULT_ITERATION_COUNT,
                 deferred_critical_params=None):
        super().__init__(deferred_critical_params)
        self.password = _password_bytes(password)
        if salt_length < constants.PBES2_MIN_SALT_LENGTH:
            raise errors.MalformedInputError('The salt length must be at least {0} bytes'.format(
                constants.PBES2_MIN_SALT_LENGTH))
        if iteration_count < constants.PBES2_MIN_ITERATION_COUNT:
            raise errors.MalformedInputError('The iteration count must be at least {0}'.format(
                constants.PBES2_MIN_ITERATION_COUNT))
        self.salt_length = salt_length
        self.iteration_count = iteration_count

    def encrypt(self, header, plaintext):
        alg, enc = self._check(header)
        salt_input = os.urandom(self.salt_length)
        header = header.update(p2s=salt_input, p2c=self.iteration_count)
        kek = kdf.derive_pbes2_key(self.password, alg, salt_input, self.iteration_count)
        cek = content.generate_cek(enc)
        return content.encrypt(header, plaintext, cek, aes.wrap_key(kek, cek))


class PasswordBasedDecrypter(_Decrypter, interfaces.JWEDecrypter):
    """PBES2 decrypter (PBES2-HS256+A128KW...).

    :param int max_iteration_count: Largest ``p2c`` honoured.

    """
    SUPPORTED_ALGORITHMS = algorithms.PBES2

    def __init__(self, password, max_iteration_count=constants.PBES2_MAX_ITERATION_COUNT,
                 deferred_critical_params=None,
                 max_decompressed_size=constants.MAX_DECOMPRESSED_SIZE):
        super().__init__(deferred_critical_params, max_decompressed_size)
        self.password = _password_bytes(password)
        self.max_iteration_count = max_iteration_count

    def decrypt(self, header, encrypted_key, iv, ciphertext, auth_tag):
        alg, _ = self._check(header)
        encrypted_key = _require_encrypted_key(encrypted_key)
        if header.p2s is None or len(header.p2s) < constants.PBES2_MIN_SALT_LENGTH:
            raise errors.MalformedInputError(
                'The "p2s" header parameter must be at least {0} bytes'.format(
                    constants.PBES2_MIN_SALT_LENGTH))
        if header.p2c is None:
            raise errors.MalformedInputError('Missing "p2c" header parameter')
        if header.p2c > self.max_iteration_count:
            raise errors.MalformedInputError(
                'The "p2c" header parameter exceeds {0}'.format(self.max_iteration_count))
        kek = kdf.derive_pbes2_key(self.password, alg, header.p2s, header.p2c)
        cek = aes.unwrap_key(kek, encrypted_key)
        return self._decrypt_content(header, iv, ciphertext, auth_tag, cek)


def encrypter_for(key: jose_jwk.JWK, alg: algorithms.Algorithm,
                  **kwargs: Any) -> interfaces.JWEEncrypter:
    """Encrypter for ``alg`` with ``key``."""
    if alg == algorithms.DIR:
        return DirectEncrypter(key, **kwargs)
    if alg in algorithms.RSA_KEY_ENCRYPTION:
        return RSAEncrypter(key, **kwargs)
    if alg in algorithms.AES_KW or alg in algorithms.AES_GCM_KW:
        return AESEncrypter(key, **kwargs)
    if alg in algorithms.ECDH_ES_FAMILY:
        return ECDHEncrypter(key, **kwargs)
    if alg in algorithms.PBES2:
        return PasswordBasedEncrypter(support.secret_bytes(key, _ENC), **kwargs)
    raise errors.UnsupportedAlgorithmError(_KIND, alg, algorithms.JWEAlgorithm.REGISTRY.values())


def decrypter_for(key: jose_jwk.JWK, alg: algorithms.Algorithm,
                  **kwargs: Any) -> interfaces.JWEDecrypter:
    """Decrypter for ``alg`` with ``key``."""
    if alg == algorithms.DIR:
        return DirectDecrypter(key, **kwargs)
    if alg in algorithms.RSA_KEY_ENCRYPTION:
        return RSADecrypter(key, **kwargs)
    if alg in algorithms.AES_KW or alg in algorithms.AES_GCM_KW:
        return AESDecrypter(key, **kwargs)
    if alg in algorithms.ECDH_ES_FAMILY:
        return ECDHDecrypter(key, **kwargs)
    if alg in algorithms.PBES2:
        return PasswordBasedDecrypter(support.secret_bytes(key, _ENC), **kwargs)
    raise errors.UnsupportedAlgorithmError(_KIND, alg, algorithms.JWEAlgorithm.REGISTRY.values())
