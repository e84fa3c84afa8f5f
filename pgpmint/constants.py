"""
pgpmint.constants
-----------------
Key usage sets and limits. Algorithm and signature identifiers come from
pgpy.constants; this module only fixes which of them pgpmint writes.
"""

from __future__ import annotations
from pgpy.constants import KeyFlags

PRIMARY_USAGE = frozenset({KeyFlags.Certify, KeyFlags.Sign})
SUBKEY_USAGE = frozenset({KeyFlags.EncryptCommunications, KeyFlags.EncryptStorage})

# Armor block types
PUBLIC_KEY_BLOCK = "PUBLIC KEY BLOCK"
PRIVATE_KEY_BLOCK = "PRIVATE KEY BLOCK"

DEFAULT_RSA_BITS = 2048
MAX_KEY_LIFETIME = 0xFFFFFFFF   # key expiration time is a 32-bit count of seconds


def flag_mask(flags) -> int:
    """Collapse a set of KeyFlags into the single-octet bitmask form."""
    mask = 0
    for flag in flags:
        mask |= int(flag)
    return mask
