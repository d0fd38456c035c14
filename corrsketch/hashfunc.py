import hashlib
import struct

import numpy as np

# The inverse golden ratio, written out to keep the full double precision.
_inverse_golden_ratio = 0.6180339887498949025
_golden_ratio = _inverse_golden_ratio + 1.0


def sha1_hash32(data):
    """A 32-bit hash function based on SHA1.

    Args:
        data (bytes): the data to generate 32-bit integer hash from.

    Returns:
        int: an integer hash value that can be encoded using 32 bits.
    """
    return struct.unpack('<I', hashlib.sha1(data).digest()[:4])[0]


def hash_key(key, hashfunc=sha1_hash32):
    """Hash a join key into an unsigned 32-bit integer.

    Args:
        key (str): the join key. Strings are encoded as UTF-8 before hashing,
            bytes are hashed as they are.
        hashfunc (Callable): a function taking bytes and returning an integer
            that can be encoded with 32 bits.

    Returns:
        int: the key hash in the range [0, 2^32).
    """
    if isinstance(key, str):
        key = key.encode('utf-8')
    return int(hashfunc(key)) & 0xFFFFFFFF


def unit_hash(h):
    """Map a 32-bit key hash into a pseudo-uniform value in [0, 1) using the
    golden ratio multiplicative hash.

    Args:
        h (int): the key hash.

    Returns:
        float: the unit hash of `h`.
    """
    v = (h + 1.0) * _golden_ratio
    return v - np.floor(v)


def unit_hashes(hashes):
    """Vectorized :func:`unit_hash` over an array of key hashes.

    Returns:
        numpy.ndarray: float64 unit hashes.
    """
    v = (np.asarray(hashes, dtype=np.float64) + 1.0) * _golden_ratio
    return v - np.floor(v)
