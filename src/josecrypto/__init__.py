"""JSON Object Signing and Encryption (JOSE).

This package implements the standards developed by the IETF
`JOSE working group`_, in particular:

  - `JSON Web Signature (JWS)`_, compact serialization
  - `JSON Web Encryption (JWE)`_, compact serialization
  - `JSON Web Key (JWK)`_
  - `JSON Web Algorithms (JWA)`_

.. _`JOSE working group`: https://datatracker.ietf.org/wg/jose/

.. _`JSON Web Signature (JWS)`: https://tools.ietf.org/html/rfc7515

.. _`JSON Web Encryption (JWE)`: https://tools.ietf.org/html/rfc7516

.. _`JSON Web Key (JWK)`: https://tools.ietf.org/html/rfc7517

.. _`JSON Web Algorithms (JWA)`: https://tools.ietf.org/html/rfc7518

"""
from josecrypto.algorithms import (
    A128CBC_HS256,
    A128GCM,
    A128GCMKW,
    A128KW,
    A192CBC_HS384,
    A192GCM,
    A192GCMKW,
    A192KW,
    A256CBC_HS512,
    A256GCM,
    A256GCMKW,
    A256KW,
    Algorithm,
    Curve,
    DIR,
    ECDH_ES,
    ECDH_ES_A128KW,
    ECDH_ES_A192KW,
    ECDH_ES_A256KW,
    EDDSA,
    EncryptionMethod,
    ES256,
    ES384,
    ES512,
    HS256,
    HS384,
    HS512,
    JWEAlgorithm,
    JWSAlgorithm,
    PBES2_HS256_A128KW,
    PBES2_HS384_A192KW,
    PBES2_HS512_A256KW,
    PS256,
    PS384,
    PS512,
    Requirement,
    RS256,
    RS384,
    RS512,
    RSA1_5,
    RSA_OAEP,
    RSA_OAEP_256,
)

from josecrypto.crit import CriticalHeaderParamsDeferral

from josecrypto.encrypters import (
    AESDecrypter,
    AESEncrypter,
    DirectDecrypter,
    DirectEncrypter,
    ECDHDecrypter,
    ECDHEncrypter,
    PasswordBasedDecrypter,
    PasswordBasedEncrypter,
    RSADecrypter,
    RSAEncrypter,
)

from josecrypto.errors import (
    AuthenticationError,
    Error,
    IllegalStateError,
    InternalError,
    KeyLengthError,
    KeyUseError,
    MalformedInputError,
    ParseError,
    UnsupportedAlgorithmError,
    UnsupportedCriticalHeaderError,
)

from josecrypto.header import (
    Header,
    JWEHeader,
    JWSHeader,
)

from josecrypto.interfaces import (
    JWEDecrypter,
    JWEEncrypter,
    JWSSigner,
    JWSVerifier,
)

from josecrypto.jwe import JWEObject

from josecrypto.jwk import (
    ECKey,
    JWK,
    JWKSet,
    KeyUse,
    OctetKeyPair,
    OctetSequenceKey,
    RSAKey,
)

from josecrypto.jws import JWSObject

from josecrypto.selector import (
    JWKMatcher,
    JWKSelector,
)

from josecrypto.signers import (
    ECDSASigner,
    ECDSAVerifier,
    Ed25519Signer,
    Ed25519Verifier,
    MACSigner,
    MACVerifier,
    RSASSASigner,
    RSASSAVerifier,
)
