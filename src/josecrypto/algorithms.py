"""JSON Web Algorithms registry.

https://tools.ietf.org/html/rfc7518

Algorithms are plain name tags. What a provider can do with them is
declared by the provider itself, see :mod:`josecrypto.signers` and
:mod:`josecrypto.encrypters`.

"""
from collections.abc import Hashable
import enum
from typing import Any
from typing import Dict
from typing import Optional
from typing import Type

from cryptography.hazmat.primitives.asymmetric import ec
from josepy import errors as jose_errors
from josepy import interfaces


class Requirement(enum.Enum):
    """Implementation requirement level, as stated in RFC 7518."""
    REQUIRED = 'Required'
    RECOMMENDED = 'Recommended'
    OPTIONAL = 'Optional'


class Algorithm(interfaces.JSONDeSerializable, Hashable):
    """JOSE algorithm name.

    Algorithms compare equal by name only, so an :class:`Algorithm`
    decoded from a JWK ``alg`` member matches the registered
    :class:`JWSAlgorithm` of the same name.

    :ivar str name: Algorithm name, e.g. ``"RS256"``.
    :ivar requirement: :class:`Requirement` or ``None`` if unregistered.

    """
    REGISTRY: Dict[str, 'Algorithm'] = {}

    def __init__(self, name: str, requirement: Optional[Requirement] = None) -> None:
        self.name = name
        self.requirement = requirement

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Algorithm):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.name

    @classmethod
    def register(cls, alg):
        """Register algorithm for parsing."""
        cls.REGISTRY[alg.name] = alg
        return alg

    @classmethod
    def parse(cls, name: str):
        """Get the registered algorithm, or a new unregistered one."""
        try:
            return cls.REGISTRY[name]
        except KeyError:
            return cls(name)

    def to_partial_json(self) -> str:
        return self.name

    @classmethod
    def from_json(cls, jobj: Any):
        if not isinstance(jobj, str):
            raise jose_errors.DeserializationError(
                'Algorithm name must be a string: {0!r}'.format(jobj))
        return cls.parse(jobj)


class JWSAlgorithm(Algorithm):
    """JSON Web Signature algorithm."""
    REGISTRY: Dict[str, Algorithm] = {}


class JWEAlgorithm(Algorithm):
    """JSON Web Encryption key management algorithm."""
    REGISTRY: Dict[str, Algorithm] = {}


class EncryptionMethod(Algorithm):
    """JSON Web Encryption content encryption method.

    :ivar int cek_bit_length: Content encryption key length, in bits.

    """
    REGISTRY: Dict[str, Algorithm] = {}

    def __init__(self, name: str, requirement: Optional[Requirement] = None,
                 cek_bit_length: int = 0) -> None:
        super().__init__(name, requirement)
        self.cek_bit_length = cek_bit_length


def parse_algorithm(name: str) -> Algorithm:
    """Look ``name`` up in all registries.

    Used for the JWK ``alg`` member, which may name any kind of
    algorithm.

    """
    for registry_cls in (JWSAlgorithm, JWEAlgorithm, EncryptionMethod):
        if name in registry_cls.REGISTRY:
            return registry_cls.REGISTRY[name]
    return Algorithm(name)


class Curve(Hashable):
    """Cryptographic curve, as used in the JWK ``crv`` member.

    :ivar str name: JOSE name, e.g. ``"P-256"``.
    :ivar str std_name: Name used by ``cryptography``, e.g. ``"secp256r1"``.
    :ivar crypto_curve: ``cryptography`` curve class, for EC curves.
    :ivar int coordinate_size: Bytes per coordinate, for EC curves.

    """
    REGISTRY: Dict[str, 'Curve'] = {}

    def __init__(self, name: str, std_name: Optional[str] = None,
                 crypto_curve: Optional[Type[ec.EllipticCurve]] = None,
                 coordinate_size: int = 0) -> None:
        self.name = name
        self.std_name = std_name
        self.crypto_curve = crypto_curve
        self.coordinate_size = coordinate_size

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Curve):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        return self.name

    def __str__(self) -> str:
        return self.name

    @classmethod
    def register(cls, curve: 'Curve') -> 'Curve':
        """Register curve for parsing."""
        cls.REGISTRY[curve.name] = curve
        return curve

    @classmethod
    def parse(cls, name: str) -> 'Curve':
        """Get the registered curve, or a new unregistered one."""
        try:
            return cls.REGISTRY[name]
        except KeyError:
            return cls(name)

    @classmethod
    def for_std_name(cls, std_name: str) -> Optional['Curve']:
        """Find the registered curve for a ``cryptography`` curve name."""
        for curve in cls.REGISTRY.values():
            if curve.std_name == std_name:
                return curve
        return None

    @classmethod
    def for_jws_algorithm(cls, alg: Algorithm) -> Optional['Curve']:
        """Curve mandated by an ECDSA or EdDSA algorithm."""
        return _JWS_CURVES.get(alg)


#: HMAC using SHA-256
HS256 = JWSAlgorithm.register(JWSAlgorithm('HS256', Requirement.REQUIRED))
#: HMAC using SHA-384
HS384 = JWSAlgorithm.register(JWSAlgorithm('HS384', Requirement.OPTIONAL))
#: HMAC using SHA-512
HS512 = JWSAlgorithm.register(JWSAlgorithm('HS512', Requirement.OPTIONAL))

#: RSASSA-PKCS-v1_5 using SHA-256
RS256 = JWSAlgorithm.register(JWSAlgorithm('RS256', Requirement.RECOMMENDED))
#: RSASSA-PKCS-v1_5 using SHA-384
RS384 = JWSAlgorithm.register(JWSAlgorithm('RS384', Requirement.OPTIONAL))
#: RSASSA-PKCS-v1_5 using SHA-512
RS512 = JWSAlgorithm.register(JWSAlgorithm('RS512', Requirement.OPTIONAL))

#: ECDSA using P-256 and SHA-256
ES256 = JWSAlgorithm.register(JWSAlgorithm('ES256', Requirement.RECOMMENDED))
#: ECDSA using P-384 and SHA-384
ES384 = JWSAlgorithm.register(JWSAlgorithm('ES384', Requirement.OPTIONAL))
#: ECDSA using P-521 and SHA-512
ES512 = JWSAlgorithm.register(JWSAlgorithm('ES512', Requirement.OPTIONAL))

#: RSASSA-PSS using SHA-256 and MGF1 with SHA-256
PS256 = JWSAlgorithm.register(JWSAlgorithm('PS256', Requirement.OPTIONAL))
#: RSASSA-PSS using SHA-384 and MGF1 with SHA-384
PS384 = JWSAlgorithm.register(JWSAlgorithm('PS384', Requirement.OPTIONAL))
#: RSASSA-PSS using SHA-512 and MGF1 with SHA-512
PS512 = JWSAlgorithm.register(JWSAlgorithm('PS512', Requirement.OPTIONAL))

#: Edwards-curve signature (Ed25519)
EDDSA = JWSAlgorithm.register(JWSAlgorithm('EdDSA', Requirement.OPTIONAL))

HMAC_SHA = frozenset([HS256, HS384, HS512])
RSA_SSA = frozenset([RS256, RS384, RS512, PS256, PS384, PS512])
ECDSA = frozenset([ES256, ES384, ES512])
ED = frozenset([EDDSA])

#: RSAES-PKCS1-v1_5
RSA1_5 = JWEAlgorithm.register(JWEAlgorithm('RSA1_5', Requirement.RECOMMENDED))
#: RSAES OAEP using default parameters
RSA_OAEP = JWEAlgorithm.register(JWEAlgorithm('RSA-OAEP', Requirement.RECOMMENDED))
#: RSAES OAEP using SHA-256 and MGF1 with SHA-256
RSA_OAEP_256 = JWEAlgorithm.register(JWEAlgorithm('RSA-OAEP-256', Requirement.OPTIONAL))

#: AES Key Wrap with 128-bit key
A128KW = JWEAlgorithm.register(JWEAlgorithm('A128KW', Requirement.RECOMMENDED))
#: AES Key Wrap with 192-bit key
A192KW = JWEAlgorithm.register(JWEAlgorithm('A192KW', Requirement.OPTIONAL))
#: AES Key Wrap with 256-bit key
A256KW = JWEAlgorithm.register(JWEAlgorithm('A256KW', Requirement.RECOMMENDED))

#: Direct use of a shared symmetric key as the CEK
DIR = JWEAlgorithm.register(JWEAlgorithm('dir', Requirement.RECOMMENDED))

#: ECDH-ES using Concat KDF
ECDH_ES = JWEAlgorithm.register(JWEAlgorithm('ECDH-ES', Requirement.RECOMMENDED))
#: ECDH-ES using Concat KDF and CEK wrapped with A128KW
ECDH_ES_A128KW = JWEAlgorithm.register(
    JWEAlgorithm('ECDH-ES+A128KW', Requirement.RECOMMENDED))
#: ECDH-ES using Concat KDF and CEK wrapped with A192KW
ECDH_ES_A192KW = JWEAlgorithm.register(
    JWEAlgorithm('ECDH-ES+A192KW', Requirement.OPTIONAL))
#: ECDH-ES using Concat KDF and CEK wrapped with A256KW
ECDH_ES_A256KW = JWEAlgorithm.register(
    JWEAlgorithm('ECDH-ES+A256KW', Requirement.RECOMMENDED))

#: Key wrapping with AES GCM using 128-bit key
A128GCMKW = JWEAlgorithm.register(JWEAlgorithm('A128GCMKW', Requirement.OPTIONAL))
#: Key wrapping with AES GCM using 192-bit key
A192GCMKW = JWEAlgorithm.register(JWEAlgorithm('A192GCMKW', Requirement.OPTIONAL))
#: Key wrapping with AES GCM using 256-bit key
A256GCMKW = JWEAlgorithm.register(JWEAlgorithm('A256GCMKW', Requirement.OPTIONAL))

#: PBES2 with HMAC SHA-256 and A128KW wrapping
PBES2_HS256_A128KW = JWEAlgorithm.register(
    JWEAlgorithm('PBES2-HS256+A128KW', Requirement.OPTIONAL))
#: PBES2 with HMAC SHA-384 and A192KW wrapping
PBES2_HS384_A192KW = JWEAlgorithm.register(
    JWEAlgorithm('PBES2-HS384+A192KW', Requirement.OPTIONAL))
#: PBES2 with HMAC SHA-512 and A256KW wrapping
PBES2_HS512_A256KW = JWEAlgorithm.register(
    JWEAlgorithm('PBES2-HS512+A256KW', Requirement.OPTIONAL))

RSA_KEY_ENCRYPTION = frozenset([RSA1_5, RSA_OAEP, RSA_OAEP_256])
AES_KW = frozenset([A128KW, A192KW, A256KW])
AES_GCM_KW = frozenset([A128GCMKW, A192GCMKW, A256GCMKW])
ECDH_ES_FAMILY = frozenset([ECDH_ES, ECDH_ES_A128KW, ECDH_ES_A192KW, ECDH_ES_A256KW])
PBES2 = frozenset([PBES2_HS256_A128KW, PBES2_HS384_A192KW, PBES2_HS512_A256KW])

#: AES-CBC with HMAC SHA-256, 256-bit CEK
A128CBC_HS256 = EncryptionMethod.register(
    EncryptionMethod('A128CBC-HS256', Requirement.REQUIRED, 256))
#: AES-CBC with HMAC SHA-384, 384-bit CEK
A192CBC_HS384 = EncryptionMethod.register(
    EncryptionMethod('A192CBC-HS384', Requirement.OPTIONAL, 384))
#: AES-CBC with HMAC SHA-512, 512-bit CEK
A256CBC_HS512 = EncryptionMethod.register(
    EncryptionMethod('A256CBC-HS512', Requirement.REQUIRED, 512))
#: AES GCM using 128-bit key
A128GCM = EncryptionMethod.register(
    EncryptionMethod('A128GCM', Requirement.RECOMMENDED, 128))
#: AES GCM using 192-bit key
A192GCM = EncryptionMethod.register(
    EncryptionMethod('A192GCM', Requirement.OPTIONAL, 192))
#: AES GCM using 256-bit key
A256GCM = EncryptionMethod.register(
    EncryptionMethod('A256GCM', Requirement.RECOMMENDED, 256))

AES_CBC_HMAC_SHA = frozenset([A128CBC_HS256, A192CBC_HS384, A256CBC_HS512])
AES_GCM = frozenset([A128GCM, A192GCM, A256GCM])

P_256 = Curve.register(Curve('P-256', 'secp256r1', ec.SECP256R1, 32))
P_384 = Curve.register(Curve('P-384', 'secp384r1', ec.SECP384R1, 48))
P_521 = Curve.register(Curve('P-521', 'secp521r1', ec.SECP521R1, 66))
ED25519 = Curve.register(Curve('Ed25519', 'ed25519'))
X25519 = Curve.register(Curve('X25519', 'x25519'))

_JWS_CURVES = {
    ES256: P_256,
    ES384: P_384,
    ES512: P_521,
    EDDSA: ED25519,
}
