"""CBOR utilities module.

This module isolates the underlying CBOR library (cbor2) from the rest of the
package.
"""

from typing import Any

import cbor2


def encode(obj: Any, canonical: bool = False) -> bytes:
    """Encode an object to CBOR bytes.

    Args:
        obj: The object to encode
        canonical: Whether to use canonical encoding (deterministic)

    Returns:
        CBOR-encoded bytes
    """
    return cbor2.dumps(obj, canonical=canonical)
