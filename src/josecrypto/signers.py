"""JWS signers and verifiers.

https://tools.ietf.org/html/rfc7518#section-3

"""
import collections
import logging
from typing import AbstractSet
from typing import Any
from typing import Iterable
from typing import Optional

import cryptography.exceptions
from cryptography.hazmat.primitives import constant_time
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric import utils as asym_utils

from josecrypto import algorithms
from josecrypto import constants
from josecrypto import crit
from josecrypto import errors
from josecrypto import header as jose_header
from josecrypto import interfaces
from josecrypto import jwk as jose_jwk
from josecrypto import support

logger = logging.getLogger(__name__)

MACParams = collections.namedtuple('MACParams', 'hash min_key_length')

MAC_ALGORITHMS = {
    algorithms.HS256: MACParams(hashes.SHA256, 32),
    algorithms.HS384: MACParams(hashes.SHA384, 48),
    algorithms.HS512: MACParams(hashes.SHA512, 64),
}
"""HMAC hash and minimum secret length (bytes) per algorithm."""

RSASSAParams = collections.namedtuple('RSASSAParams', 'hash pss')

RSASSA_ALGORITHMS = {
    algorithms.RS256: RSASSAParams(hashes.SHA256, False),
    algorithms.RS384: RSASSAParams(hashes.SHA384, False),
    algorithms.RS512: RSASSAParams(hashes.SHA512, False),
    algorithms.PS256: RSASSAParams(hashes.SHA256, True),
    algorithms.PS384: RSASSAParams(hashes.SHA384, True),
    algorithms.PS512: RSASSAParams(hashes.SHA512, True),
}

ECDSA_ALGORITHMS = {
    algorithms.ES256: hashes.SHA256,
    algorithms.ES384: hashes.SHA384,
    algorithms.ES512: hashes.SHA512,
}

support.check_dispatch_table(MAC_ALGORITHMS, algorithms.HMAC_SHA, 'MAC')
support.check_dispatch_table(RSASSA_ALGORITHMS, algorithms.RSA_SSA, 'RSASSA')
support.check_dispatch_table(ECDSA_ALGORITHMS, algorithms.ECDSA, 'ECDSA')

EC_CURVES = frozenset([algorithms.P_256, algorithms.P_384, algorithms.P_521])
"""Curves supported by the ECDSA signer and verifier."""

_KIND = 'JWS algorithm'


class _Provider:
    # pylint: disable=too-few-public-methods

    def __init__(self, deferred_critical_params: Optional[Iterable[str]] = None) -> None:
        self.critical_params = crit.CriticalHeaderParamsDeferral(
            deferred=deferred_critical_params)

    def _check(self, header: jose_header.Header) -> algorithms.Algorithm:
        return support.check_header(
            header, self.supported_algorithms(), self.critical_params, _KIND)


class _MACProvider(_Provider):

    SUPPORTED_ALGORITHMS = algorithms.HMAC_SHA

    def __init__(self, secret: Any, deferred_critical_params=None) -> None:
        super().__init__(deferred_critical_params)
        self.secret = support.secret_bytes(secret, jose_jwk.KeyUse.SIGNATURE)
        if len(self.secret) < constants.MIN_HMAC_KEY_SIZE:
            raise errors.KeyLengthError(
                'The secret length must be at least {0} bits'.format(
                    constants.MIN_HMAC_KEY_SIZE * 8))

    def _mac(self, header: jose_header.Header, signing_input: bytes) -> bytes:
        params = MAC_ALGORITHMS[self._check(header)]
        if len(self.secret) < params.min_key_length:
            raise errors.KeyLengthError(
                'The secret length for {0} must be at least {1} bits'.format(
                    header.alg, params.min_key_length * 8))
        mac = hmac.HMAC(self.secret, params.hash())
        mac.update(signing_input)
        return mac.finalize()

    def accepted_algorithms(self) -> AbstractSet[algorithms.Algorithm]:
        """HMAC algorithms for which the secret is long enough."""
        return frozenset(alg for alg, params in MAC_ALGORITHMS.items()
                         if len(self.secret) >= params.min_key_length)


class MACSigner(_MACProvider, interfaces.JWSSigner):
    """HMAC signer (HS256, HS384, HS512).

    :param secret: Shared secret, `bytes`, `str` (UTF-8 encoded) or
        :class:`~josecrypto.jwk.OctetSequenceKey`, at least 256 bits.

    """

    def sign(self, header, signing_input):
        return self._mac(header, signing_input)


class MACVerifier(_MACProvider, interfaces.JWSVerifier):
    """HMAC verifier (HS256, HS384, HS512)."""

    def verify(self, header, signing_input, signature):
        expected = self._mac(header, signing_input)
        if not constant_time.bytes_eq(expected, signature):
            logger.debug('HMAC verification failed for %s', header.alg)
            return False
        return True


def _rsa_padding(params: RSASSAParams) -> padding.AsymmetricPadding:
    if params.pss:
        # salt length equal to the hash output, RFC 7518 3.5
        return padding.PSS(mgf=padding.MGF1(params.hash()),
                           salt_length=params.hash.digest_size)
    return padding.PKCS1v15()


def _check_rsa_key_size(key: Any, allow_weak_key: bool) -> None:
    if key.key_size < constants.MIN_RSA_KEY_SIZE and not allow_weak_key:
        raise errors.KeyLengthError('The RSA key size must be at least {0} bits'.format(
            constants.MIN_RSA_KEY_SIZE))


class RSASSASigner(_Provider, interfaces.JWSSigner):
    """RSASSA-PKCS1-v1_5 and RSASSA-PSS signer (RS*, PS*).

    :param key: Private :class:`~josecrypto.jwk.RSAKey` or `cryptography`
        RSA private key.
    :param bool allow_weak_key: Accept keys shorter than
        :const:`~josecrypto.constants.MIN_RSA_KEY_SIZE`.

    """
    SUPPORTED_ALGORITHMS = algorithms.RSA_SSA

    def __init__(self, key, allow_weak_key=False, deferred_critical_params=None):
        super().__init__(deferred_critical_params)
        self.key = support.unwrap_key(
            key, jose_jwk.RSAKey, (rsa.RSAPrivateKey,), jose_jwk.KeyUse.SIGNATURE)
        _check_rsa_key_size(self.key, allow_weak_key)

    def sign(self, header, signing_input):
        params = RSASSA_ALGORITHMS[self._check(header)]
        return self.key.sign(signing_input, _rsa_padding(params), params.hash())


class RSASSAVerifier(_Provider, interfaces.JWSVerifier):
    """RSASSA-PKCS1-v1_5 and RSASSA-PSS verifier (RS*, PS*).

    :param key: :class:`~josecrypto.jwk.RSAKey` or `cryptography` RSA
        public key. Private keys are reduced to their public part.

    """
    SUPPORTED_ALGORITHMS = algorithms.RSA_SSA

    def __init__(self, key, deferred_critical_params=None):
        super().__init__(deferred_critical_params)
        key = support.unwrap_key(key, jose_jwk.RSAKey, (rsa.RSAPublicKey, rsa.RSAPrivateKey),
                                 jose_jwk.KeyUse.SIGNATURE)
        self.key = key.public_key() if isinstance(key, rsa.RSAPrivateKey) else key

    def verify(self, header, signing_input, signature):
        params = RSASSA_ALGORITHMS[self._check(header)]
        try:
            self.key.verify(signature, signing_input, _rsa_padding(params), params.hash())
        except cryptography.exceptions.InvalidSignature as error:
            logger.debug(error, exc_info=True)
            return False
        return True


def _ec_curve(key: Any) -> algorithms.Curve:
    return support.ensure_curve(algorithms.Curve.for_std_name(key.curve.name), EC_CURVES)


class _ECDSAProvider(_Provider):

    SUPPORTED_ALGORITHMS = algorithms.ECDSA
    SUPPORTED_ELLIPTIC_CURVES = EC_CURVES

    curve: algorithms.Curve

    def supported_algorithms(self):
        """The one ECDSA algorithm matching the key's curve."""
        return frozenset(alg for alg in self.SUPPORTED_ALGORITHMS
                         if algorithms.Curve.for_jws_algorithm(alg) == self.curve)


class ECDSASigner(_ECDSAProvider, interfaces.JWSSigner):
    """ECDSA signer (ES256, ES384, ES512).

    Signatures are the fixed width ``R || S`` concatenation, not DER.

    """

    def __init__(self, key, deferred_critical_params=None):
        super().__init__(deferred_critical_params)
        self.key = support.unwrap_key(
            key, jose_jwk.ECKey, (ec.EllipticCurvePrivateKey,), jose_jwk.KeyUse.SIGNATURE)
        self.curve = _ec_curve(self.key)

    def sign(self, header, signing_input):
        hash_cls = ECDSA_ALGORITHMS[self._check(header)]
        der = self.key.sign(signing_input, ec.ECDSA(hash_cls()))
        r, s = asym_utils.decode_dss_signature(der)  # pylint: disable=invalid-name
        size = self.curve.coordinate_size
        return r.to_bytes(size, 'big') + s.to_bytes(size, 'big')


class ECDSAVerifier(_ECDSAProvider, interfaces.JWSVerifier):
    """ECDSA verifier (ES256, ES384, ES512)."""

    def __init__(self, key, deferred_critical_params=None):
        super().__init__(deferred_critical_params)
        key = support.unwrap_key(
            key, jose_jwk.ECKey, (ec.EllipticCurvePublicKey, ec.EllipticCurvePrivateKey),
            jose_jwk.KeyUse.SIGNATURE)
        self.key = key.public_key() if isinstance(key, ec.EllipticCurvePrivateKey) else key
        self.curve = _ec_curve(self.key)

    def verify(self, header, signing_input, signature):
        hash_cls = ECDSA_ALGORITHMS[self._check(header)]
        size = self.curve.coordinate_size
        if len(signature) != 2 * size:
            logger.debug('ECDSA signature has %d bytes, expected %d',
                         len(signature), 2 * size)
            return False
        der = asym_utils.encode_dss_signature(
            int.from_bytes(signature[:size], 'big'), int.from_bytes(signature[size:], 'big'))
        try:
            self.key.verify(der, signing_input, ec.ECDSA(hash_cls()))
        except cryptography.exceptions.InvalidSignature as error:
            logger.debug(error, exc_info=True)
            return False
        return True


class Ed25519Signer(_Provider, interfaces.JWSSigner):
    """EdDSA signer over Ed25519 :class:`~josecrypto.jwk.OctetKeyPair` keys."""
    SUPPORTED_ALGORITHMS = algorithms.ED
    SUPPORTED_ELLIPTIC_CURVES = frozenset([algorithms.ED25519])

    def __init__(self, key, deferred_critical_params=None):
        super().__init__(deferred_critical_params)
        self.key = support.unwrap_key(key, jose_jwk.OctetKeyPair,
                                      (ed25519.Ed25519PrivateKey,), jose_jwk.KeyUse.SIGNATURE)

    def sign(self, header, signing_input):
        self._check(header)
        return self.key.sign(signing_input)


class Ed25519Verifier(_Provider, interfaces.JWSVerifier):
    """EdDSA verifier over Ed25519 :class:`~josecrypto.jwk.OctetKeyPair` keys."""
    SUPPORTED_ALGORITHMS = algorithms.ED
    SUPPORTED_ELLIPTIC_CURVES = frozenset([algorithms.ED25519])

    def __init__(self, key, deferred_critical_params=None):
        super().__init__(deferred_critical_params)
        key = support.unwrap_key(
            key, jose_jwk.OctetKeyPair,
            (ed25519.Ed25519PublicKey, ed25519.Ed25519PrivateKey), jose_jwk.KeyUse.SIGNATURE)
        self.key = key.public_key() if isinstance(key, ed25519.Ed25519PrivateKey) else key

    def verify(self, header, signing_input, signature):
        self._check(header)
        try:
            self.key.verify(signature, signing_input)
        except cryptography.exceptions.InvalidSignature as error:
            logger.debug(error, exc_info=True)
            return False
        return True


def signer_for(key: jose_jwk.JWK, **kwargs: Any) -> interfaces.JWSSigner:
    """Signer suited to the type of ``key``."""
    if isinstance(key, jose_jwk.OctetSequenceKey):
        return MACSigner(key, **kwargs)
    if isinstance(key, jose_jwk.RSAKey):
        return RSASSASigner(key, **kwargs)
    if isinstance(key, jose_jwk.ECKey):
        return ECDSASigner(key, **kwargs)
    if isinstance(key, jose_jwk.OctetKeyPair):
        return Ed25519Signer(key, **kwargs)
    raise errors.MalformedInputError('No signer for key type {0}'.format(key.typ))


def verifier_for(key: jose_jwk.JWK, **kwargs: Any) -> interfaces.JWSVerifier:
    """Verifier suited to the type of ``key``."""
    if isinstance(key, jose_jwk.OctetSequenceKey):
        return MACVerifier(key, **kwargs)
    if isinstance(key, jose_jwk.RSAKey):
        return RSASSAVerifier(key, **kwargs)
    if isinstance(key, jose_jwk.ECKey):
        return ECDSAVerifier(key, **kwargs)
    if isinstance(key, jose_jwk.OctetKeyPair):
        return Ed25519Verifier(key, **kwargs)
    raise errors.MalformedInputError('No verifier for key type {0}'.format(key.typ))
