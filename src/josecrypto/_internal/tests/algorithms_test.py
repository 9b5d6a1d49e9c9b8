"""Tests for josecrypto.algorithms."""
import sys
import unittest

from josepy import errors as jose_errors
import pytest


class AlgorithmTest(unittest.TestCase):
    """Tests for josecrypto.algorithms.Algorithm."""

    def test_equality_by_name(self):
        from josecrypto.algorithms import Algorithm
        from josecrypto.algorithms import JWSAlgorithm
        from josecrypto.algorithms import RS256
        assert JWSAlgorithm('RS256') == RS256
        assert Algorithm('RS256') == RS256
        assert hash(Algorithm('RS256')) == hash(RS256)
        assert RS256 != JWSAlgorithm('RS384')
        assert RS256 != 'RS256'

    def test_parse_registered(self):
        from josecrypto.algorithms import JWEAlgorithm
        from josecrypto.algorithms import RSA_OAEP_256
        from josecrypto.algorithms import Requirement
        alg = JWEAlgorithm.parse('RSA-OAEP-256')
        assert alg is RSA_OAEP_256
        assert alg.requirement is Requirement.OPTIONAL

    def test_parse_unregistered(self):
        from josecrypto.algorithms import JWSAlgorithm
        alg = JWSAlgorithm.parse('XS256')
        assert alg.name == 'XS256'
        assert alg.requirement is None
        assert 'XS256' not in JWSAlgorithm.REGISTRY

    def test_registries_are_separate(self):
        from josecrypto.algorithms import EncryptionMethod
        from josecrypto.algorithms import JWEAlgorithm
        from josecrypto.algorithms import JWSAlgorithm
        assert 'dir' in JWEAlgorithm.REGISTRY
        assert 'dir' not in JWSAlgorithm.REGISTRY
        assert 'A128GCM' in EncryptionMethod.REGISTRY
        assert 'A128GCM' not in JWEAlgorithm.REGISTRY

    def test_json(self):
        from josecrypto.algorithms import ES512
        from josecrypto.algorithms import JWSAlgorithm
        assert ES512.to_partial_json() == 'ES512'
        assert JWSAlgorithm.from_json('ES512') is ES512
        assert ES512.json_dumps() == '"ES512"'

    def test_from_json_not_string(self):
        from josecrypto.algorithms import JWSAlgorithm
        with pytest.raises(jose_errors.DeserializationError):
            JWSAlgorithm.from_json(256)

    def test_repr_str(self):
        from josecrypto.algorithms import A128CBC_HS256
        assert repr(A128CBC_HS256) == 'A128CBC-HS256'
        assert str(A128CBC_HS256) == 'A128CBC-HS256'

    def test_parse_algorithm_any_registry(self):
        from josecrypto.algorithms import A256GCM
        from josecrypto.algorithms import Algorithm
        from josecrypto.algorithms import ECDH_ES
        from josecrypto.algorithms import HS512
        from josecrypto.algorithms import parse_algorithm
        assert parse_algorithm('HS512') is HS512
        assert parse_algorithm('ECDH-ES') is ECDH_ES
        assert parse_algorithm('A256GCM') is A256GCM
        assert type(parse_algorithm('foo')) is Algorithm


class EncryptionMethodTest(unittest.TestCase):
    """Tests for josecrypto.algorithms.EncryptionMethod."""

    def test_cek_bit_lengths(self):
        from josecrypto import algorithms
        assert {enc.name: enc.cek_bit_length for enc in
                algorithms.AES_CBC_HMAC_SHA | algorithms.AES_GCM} == {
            'A128CBC-HS256': 256,
            'A192CBC-HS384': 384,
            'A256CBC-HS512': 512,
            'A128GCM': 128,
            'A192GCM': 192,
            'A256GCM': 256,
        }


class FamiliesTest(unittest.TestCase):

    def test_jws_families_cover_registry(self):
        from josecrypto import algorithms
        assert (algorithms.HMAC_SHA | algorithms.RSA_SSA | algorithms.ECDSA |
                algorithms.ED) == frozenset(algorithms.JWSAlgorithm.REGISTRY.values())

    def test_jwe_families_cover_registry(self):
        from josecrypto import algorithms
        assert (algorithms.RSA_KEY_ENCRYPTION | algorithms.AES_KW |
                algorithms.AES_GCM_KW | algorithms.ECDH_ES_FAMILY | algorithms.PBES2 |
                {algorithms.DIR}) == frozenset(algorithms.JWEAlgorithm.REGISTRY.values())


class CurveTest(unittest.TestCase):
    """Tests for josecrypto.algorithms.Curve."""

    def test_for_std_name(self):
        from josecrypto.algorithms import Curve
        from josecrypto.algorithms import P_384
        assert Curve.for_std_name('secp384r1') is P_384
        assert Curve.for_std_name('secp256k1') is None

    def test_for_jws_algorithm(self):
        from josecrypto import algorithms
        assert algorithms.Curve.for_jws_algorithm(algorithms.ES256) is algorithms.P_256
        assert algorithms.Curve.for_jws_algorithm(algorithms.ES512) is algorithms.P_521
        assert algorithms.Curve.for_jws_algorithm(algorithms.EDDSA) is algorithms.ED25519
        assert algorithms.Curve.for_jws_algorithm(algorithms.RS256) is None

    def test_parse(self):
        from josecrypto.algorithms import Curve
        from josecrypto.algorithms import P_256
        assert Curve.parse('P-256') is P_256
        assert Curve.parse('P-192') == Curve('P-192')
        assert Curve.parse('P-192').crypto_curve is None

    def test_coordinate_sizes(self):
        from josecrypto import algorithms
        assert algorithms.P_256.coordinate_size == 32
        assert algorithms.P_384.coordinate_size == 48
        assert algorithms.P_521.coordinate_size == 66


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
