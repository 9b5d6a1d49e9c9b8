"""Critical header parameter (``crit``) policy."""
from typing import AbstractSet
from typing import Iterable
from typing import Optional

from josecrypto import errors
from josecrypto import header as jose_header


class CriticalHeaderParamsDeferral:
    """Decides whether a header's ``crit`` parameters are acceptable.

    A critical parameter passes if the provider processes it itself
    or the application declared it will process it (deferred).
    Instances are immutable.

    :ivar frozenset processed: Names processed by the provider.
    :ivar frozenset deferred: Names deferred to the application.

    """
    __slots__ = ('_processed', '_deferred')

    def __init__(self, deferred: Optional[Iterable[str]] = None,
                 processed: Optional[Iterable[str]] = None) -> None:
        object.__setattr__(self, '_deferred', frozenset(deferred or ()))
        object.__setattr__(self, '_processed', frozenset(processed or ()))

    def __setattr__(self, name, value):
        raise AttributeError("can't set attribute")

    @property
    def processed(self) -> AbstractSet[str]:
        """Critical parameter names understood by the provider."""
        return self._processed

    @property
    def deferred(self) -> AbstractSet[str]:
        """Critical parameter names deferred to the application."""
        return self._deferred

    def unsupported(self, header: jose_header.Header) -> AbstractSet[str]:
        """Names listed in ``crit`` that nobody handles."""
        return frozenset(name for name in header.crit or ()
                         if name not in self._processed and name not in self._deferred)

    def header_passes(self, header: jose_header.Header) -> bool:
        """Does ``header`` pass the policy?"""
        return not self.unsupported(header)

    def ensure_header_passes(self, header: jose_header.Header) -> None:
        """Check ``header`` against the policy.

        :raises errors.UnsupportedCriticalHeaderError: if it does not pass

        """
        unsupported = self.unsupported(header)
        if unsupported:
            raise errors.UnsupportedCriticalHeaderError(unsupported)

    def __repr__(self) -> str:
        return '{0}(deferred={1!r}, processed={2!r})'.format(
            self.__class__.__name__, sorted(self._deferred), sorted(self._processed))
