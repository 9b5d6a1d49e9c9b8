"""JOSE errors."""
from typing import Any
from typing import Iterable
from typing import Optional

from josepy import errors as jose_errors


class Error(Exception):
    """Generic JOSE error."""


class UnsupportedAlgorithmError(Error):
    """Requested algorithm, encryption method or curve is not supported.

    :ivar str kind: What was rejected, e.g. ``"JWS algorithm"``.
    :ivar value: The offending value.
    :ivar frozenset supported: Values the provider would have accepted.

    """

    def __init__(self, kind: str, value: Any, supported: Iterable[Any] = ()) -> None:
        self.kind = kind
        self.value = value
        self.supported = frozenset(supported)
        super().__init__(str(self))

    def __str__(self) -> str:
        names = sorted(str(item) for item in self.supported)
        if not names:
            return 'Unsupported {0} {1!r}'.format(self.kind, str(self.value))
        if len(names) == 1:
            expected = names[0]
        else:
            expected = '{0} or {1}'.format(', '.join(names[:-1]), names[-1])
        return 'Unsupported {0} {1!r}, must be {2}'.format(
            self.kind, str(self.value), expected)


class UnsupportedCriticalHeaderError(Error):
    """A ``crit`` header parameter is neither processed nor deferred.

    :ivar frozenset params: Names of the offending parameters.

    """

    def __init__(self, params: Iterable[str]) -> None:
        self.params = frozenset(params)
        super().__init__(str(self))

    def __str__(self) -> str:
        return 'Unsupported critical header parameter(s): {0}'.format(
            ', '.join(sorted(self.params)))


class MalformedInputError(Error):
    """Structurally invalid input: missing parts, bad lengths, bad keys."""


class ParseError(MalformedInputError, jose_errors.DeserializationError):
    """Compact serialization, header or key could not be parsed."""


class KeyLengthError(MalformedInputError):
    """Key length does not match what the algorithm requires."""


class KeyUseError(MalformedInputError):
    """JWK ``use`` does not permit the requested operation."""


class AuthenticationError(Error):
    """Authentication tag, MAC or key unwrap integrity check failed."""


class IllegalStateError(Error):
    """Operation attempted from the wrong object lifecycle state."""


class InternalError(Error):
    """Underlying primitive unavailable or internal tables inconsistent.

    :ivar cause: Original exception, if any.

    """

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        self.cause = cause
        super().__init__(message)
