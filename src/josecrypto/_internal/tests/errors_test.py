"""Tests for josecrypto.errors."""
import sys
import unittest

from josepy import errors as jose_errors
import pytest

from josecrypto import algorithms


class UnsupportedAlgorithmErrorTest(unittest.TestCase):
    """Tests for josecrypto.errors.UnsupportedAlgorithmError."""

    def test_str_lists_supported(self):
        from josecrypto.errors import UnsupportedAlgorithmError
        error = UnsupportedAlgorithmError(
            'JWS algorithm', algorithms.ES256, [algorithms.RS384, algorithms.RS256])
        assert str(error) == "Unsupported JWS algorithm 'ES256', must be RS256 or RS384"
        assert error.value == algorithms.ES256
        assert error.supported == frozenset([algorithms.RS256, algorithms.RS384])

    def test_str_single(self):
        from josecrypto.errors import UnsupportedAlgorithmError
        error = UnsupportedAlgorithmError('JWE algorithm', 'foo', [algorithms.DIR])
        assert str(error) == "Unsupported JWE algorithm 'foo', must be dir"

    def test_str_many(self):
        from josecrypto.errors import UnsupportedAlgorithmError
        error = UnsupportedAlgorithmError('JWS algorithm', None, algorithms.HMAC_SHA)
        assert str(error) == "Unsupported JWS algorithm 'None', must be HS256, HS384 or HS512"

    def test_str_nothing_supported(self):
        from josecrypto.errors import UnsupportedAlgorithmError
        assert str(UnsupportedAlgorithmError('curve', 'P-1')) == "Unsupported curve 'P-1'"


class UnsupportedCriticalHeaderErrorTest(unittest.TestCase):
    """Tests for josecrypto.errors.UnsupportedCriticalHeaderError."""

    def test_str(self):
        from josecrypto.errors import UnsupportedCriticalHeaderError
        error = UnsupportedCriticalHeaderError(['exp', 'b64'])
        assert error.params == frozenset(['exp', 'b64'])
        assert str(error) == 'Unsupported critical header parameter(s): b64, exp'


class HierarchyTest(unittest.TestCase):

    def test_parse_error_is_deserialization_error(self):
        from josecrypto.errors import MalformedInputError
        from josecrypto.errors import ParseError
        with pytest.raises(jose_errors.DeserializationError):
            raise ParseError('foo')
        assert issubclass(ParseError, MalformedInputError)

    def test_all_errors_share_base(self):
        from josecrypto import errors
        for cls in (errors.UnsupportedAlgorithmError, errors.UnsupportedCriticalHeaderError,
                    errors.MalformedInputError, errors.KeyLengthError, errors.KeyUseError,
                    errors.AuthenticationError, errors.IllegalStateError,
                    errors.InternalError):
            assert issubclass(cls, errors.Error)

    def test_internal_error_cause(self):
        from josecrypto.errors import InternalError
        cause = ValueError('boom')
        error = InternalError('primitive unavailable', cause)
        assert error.cause is cause
        assert str(error) == 'primitive unavailable'


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
