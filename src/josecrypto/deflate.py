"""Raw DEFLATE (RFC 1951) payload compression, ``zip=DEF``."""
import zlib
from typing import Optional

from josecrypto import constants
from josecrypto import errors

_WBITS = -zlib.MAX_WBITS  # raw stream, no zlib header


def compress(data: bytes) -> bytes:
    """Compress ``data`` into a raw DEFLATE stream."""
    compressor = zlib.compressobj(zlib.Z_DEFAULT_COMPRESSION, zlib.DEFLATED, _WBITS)
    return compressor.compress(data) + compressor.flush()


def decompress(data: bytes, max_size: int = constants.MAX_DECOMPRESSED_SIZE) -> bytes:
    """Decompress a raw DEFLATE stream, producing at most ``max_size`` bytes.

    :raises errors.MalformedInputError: if the stream is corrupt or
        expands past ``max_size``

    """
    decompressor = zlib.decompressobj(_WBITS)
    try:
        # one byte over the limit is enough to detect overflow
        result = decompressor.decompress(data, max_size + 1)
    except zlib.error as error:
        raise errors.MalformedInputError('Invalid DEFLATE data: {0}'.format(error)) from error
    if len(result) > max_size:
        raise errors.MalformedInputError(
            'Decompressed payload exceeds {0} bytes'.format(max_size))
    if not decompressor.eof:
        raise errors.MalformedInputError('Truncated DEFLATE data')
    return result


def check_zip(value: Optional[str]) -> None:
    """Only ``DEF`` (or no compression) is understood.

    :raises errors.UnsupportedAlgorithmError: otherwise

    """
    if value is not None and value != constants.DEFLATE:
        raise errors.UnsupportedAlgorithmError(
            'compression algorithm', value, (constants.DEFLATE,))


def apply(zip_value: Optional[str], data: bytes) -> bytes:
    """Compress ``data`` if the header asks for it."""
    check_zip(zip_value)
    return data if zip_value is None else compress(data)


def revert(zip_value: Optional[str], data: bytes,
           max_size: int = constants.MAX_DECOMPRESSED_SIZE) -> bytes:
    """Decompress ``data`` if the header says it is compressed."""
    check_zip(zip_value)
    return data if zip_value is None else decompress(data, max_size)
