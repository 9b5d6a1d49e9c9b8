"""JOSE constants."""

MAX_DECOMPRESSED_SIZE = 250 * 1000
"""Upper bound (bytes) on the output of DEFLATE decompression."""

MIN_RSA_KEY_SIZE = 2048
"""Minimum RSA modulus size (bits) accepted for signing and encryption."""

MIN_HMAC_KEY_SIZE = 32
"""Minimum HMAC secret length (bytes), i.e. the HS256 requirement."""

CBC_IV_LENGTH = 16
"""Initialization vector length (bytes) for AES-CBC content encryption."""

GCM_IV_LENGTH = 12
"""Initialization vector length (bytes) for AES-GCM."""

GCM_TAG_LENGTH = 16
"""Authentication tag length (bytes) for AES-GCM."""

DIRECT_KEY_LENGTHS = (16, 24, 32, 48, 64)
"""Shared key lengths (bytes) accepted by direct encryption."""

PBES2_MIN_SALT_LENGTH = 8
"""Minimum length (bytes) of the PBES2 ``p2s`` salt input."""

PBES2_DEFAULT_SALT_LENGTH = 16
"""Salt length (bytes) generated by the password-based encrypter."""

PBES2_MIN_ITERATION_COUNT = 1000
"""Minimum PBKDF2 iteration count accepted by the password-based encrypter."""

PBES2_DEFAULT_ITERATION_COUNT = 310000
"""PBKDF2 iteration count used by the password-based encrypter."""

PBES2_MAX_ITERATION_COUNT = 1000000
"""Largest ``p2c`` the password-based decrypter will honour."""

DEFLATE = 'DEF'
"""The ``zip`` header value for raw DEFLATE compression."""
