"""
Address helpers.

Entity ids for accounts are lowercase 0x-prefixed hex (the `toHexString()`
form used by the indexed contracts' events). Ids that are not hex addresses
are kept verbatim, so fixtures and alternative chains can use opaque ids.
"""

from eth_utils import is_hex_address, to_normalized_address

from .constants import ZERO_ADDRESS


def normalize_address(value) -> str:
    """Return the canonical entity id for an address-like value."""
    if isinstance(value, (bytes, bytearray)):
        return to_normalized_address(bytes(value))
    value = str(value).strip()
    if is_hex_address(value):
        return to_normalized_address(value)
    return value


def is_zero_address(value) -> bool:
    return normalize_address(value) == ZERO_ADDRESS


def addresses_to_ids(values) -> list:
    """Normalize a sequence of addresses (e.g. proposal targets)."""
    return [normalize_address(v) for v in values]
