"""JOSE provider interfaces.

A provider is configured once, with a key and the critical header
parameters the application will handle itself, and is then safe to
share between threads: no per-call state is kept on the instance.

"""
import abc
from typing import AbstractSet
from typing import Optional

from josecrypto import algorithms
from josecrypto import content
from josecrypto import crit
from josecrypto import header as jose_header

# pylint: disable=too-few-public-methods


class Provider(metaclass=abc.ABCMeta):
    """Capabilities shared by all providers."""

    SUPPORTED_ALGORITHMS: AbstractSet[algorithms.Algorithm] = frozenset()
    """Algorithms the provider class can handle, given a suitable key."""

    SUPPORTED_ELLIPTIC_CURVES: AbstractSet[algorithms.Curve] = frozenset()

    critical_params: crit.CriticalHeaderParamsDeferral

    def supported_algorithms(self) -> AbstractSet[algorithms.Algorithm]:
        """Algorithms this instance supports with its key."""
        return self.SUPPORTED_ALGORITHMS

    def supported_elliptic_curves(self) -> AbstractSet[algorithms.Curve]:
        """Elliptic curves this instance supports, empty if not applicable."""
        return self.SUPPORTED_ELLIPTIC_CURVES

    @property
    def processed_critical_params(self) -> AbstractSet[str]:
        """Critical header parameters the provider processes itself."""
        return self.critical_params.processed

    @property
    def deferred_critical_params(self) -> AbstractSet[str]:
        """Critical header parameters deferred to the application."""
        return self.critical_params.deferred


class JWSSigner(Provider):
    """Produces JWS signatures."""

    @abc.abstractmethod
    def sign(self, header: jose_header.Header, signing_input: bytes) -> bytes:
        """Sign.

        :param header: Header, its ``alg`` selects the algorithm.
        :param bytes signing_input: ``Base64URL(header).Base64URL(payload)``

        :raises errors.UnsupportedAlgorithmError: if ``alg`` is not supported
        :raises errors.UnsupportedCriticalHeaderError: for unhandled ``crit``

        """
        raise NotImplementedError()  # pragma: no cover


class JWSVerifier(Provider):
    """Checks JWS signatures."""

    @abc.abstractmethod
    def verify(self, header: jose_header.Header, signing_input: bytes,
               signature: bytes) -> bool:
        """Verify.

        :returns: ``False`` if the signature does not match, never
            raises for that reason.

        """
        raise NotImplementedError()  # pragma: no cover


class _ContentEncryptionProvider(Provider):

    def supported_encryption_methods(self) -> AbstractSet[algorithms.EncryptionMethod]:
        """Content encryption methods this instance supports."""
        return content.SUPPORTED_ENCRYPTION_METHODS


class JWEEncrypter(_ContentEncryptionProvider):
    """Encrypts JWE content."""

    @abc.abstractmethod
    def encrypt(self, header: jose_header.JWEHeader,
                plaintext: bytes) -> content.JWECryptoParts:
        """Encrypt.

        :returns: Parts, with the final header (the encrypter may add
            parameters, e.g. ``epk``).

        """
        raise NotImplementedError()  # pragma: no cover


class JWEDecrypter(_ContentEncryptionProvider):
    """Decrypts JWE content."""

    @abc.abstractmethod
    def decrypt(self, header: jose_header.JWEHeader, encrypted_key: Optional[bytes],
                iv: Optional[bytes], ciphertext: bytes,
                auth_tag: Optional[bytes]) -> bytes:
        """Decrypt.

        :raises errors.AuthenticationError: if the content cannot be
            authenticated
        :raises errors.MalformedInputError: if a part is missing, or
            present where it must not be

        """
        raise NotImplementedError()  # pragma: no cover
