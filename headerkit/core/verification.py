"""
Content hashing for header files.

Provides the digest used to fingerprint header content so that copies of
the same relative header path in different directories can be compared
without holding file contents in memory.
"""

import hashlib
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

SUPPORTED_ALGORITHMS = ("sha256", "sha512")

_CHUNK_SIZE = 8192


def compute_file_hash(file_path: Path, algorithm: str = "sha256") -> str:
    """
    Compute cryptographic hash of file.

    Args:
        file_path: Path to file
        algorithm: Hash algorithm ('sha256', 'sha512')

    Returns:
        Hex string of hash

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If algorithm is not supported

    Example:
        >>> digest = compute_file_hash(Path('generic-glibc/bits/link_lavcurrent.h'))
        >>> len(digest)
        64
    """
    if not file_path.is_file():
        raise FileNotFoundError(f"File not found: {file_path}")

    algorithm = algorithm.lower()
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(f"Unsupported hash algorithm: {algorithm}")

    hasher = hashlib.new(algorithm)

    with open(file_path, "rb") as f:
        while chunk := f.read(_CHUNK_SIZE):
            hasher.update(chunk)

    digest = hasher.hexdigest()
    logger.debug(f"{algorithm} {file_path}: {digest}")
    return digest
