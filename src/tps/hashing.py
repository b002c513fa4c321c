# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Content hashing for provider declarations."""

import hashlib

HASH_DIGEST_SIZE = 8
HASH_HEX_WIDTH = HASH_DIGEST_SIZE * 2


def hash_text(text: str) -> str:
    """Hash canonical declaration text.

    Args:
        text: Canonical text of a provider declaration.

    Returns:
        Fixed-width lowercase hexadecimal BLAKE2b digest.
    """
    return hashlib.blake2b(
        text.encode("utf-8"), digest_size=HASH_DIGEST_SIZE
    ).hexdigest()
