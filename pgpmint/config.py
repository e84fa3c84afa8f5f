"""
pgpmint.config
--------------
Runtime configuration for key generation and self-certification.

Values resolve in order: explicit dict passed to load_config(), then
PGPMINT_* environment variables, then the defaults below. Preference
defaults mirror what gpg writes into a freshly generated key, minus Bzip2.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type
from enum import IntEnum
import os, re

from pgpy.constants import CompressionAlgorithm, HashAlgorithm, SymmetricKeyAlgorithm

from .constants import DEFAULT_RSA_BITS, MAX_KEY_LIFETIME

DEFAULT_SYMMETRIC = (
    SymmetricKeyAlgorithm.AES256,
    SymmetricKeyAlgorithm.AES192,
    SymmetricKeyAlgorithm.AES128,
    SymmetricKeyAlgorithm.CAST5,
    SymmetricKeyAlgorithm.TripleDES,
)

DEFAULT_HASHES = (
    HashAlgorithm.SHA256,
    HashAlgorithm.SHA1,
    HashAlgorithm.SHA384,
    HashAlgorithm.SHA512,
    HashAlgorithm.SHA224,
)

DEFAULT_COMPRESSION = (
    CompressionAlgorithm.ZLIB,
    CompressionAlgorithm.ZIP,
)

DUPLICATE_POLICIES = ("pass", "dedupe", "reject")

# Digests a v4 RSA self-signature may be made with
SIGNATURE_HASHES = frozenset({
    HashAlgorithm.SHA1,
    HashAlgorithm.SHA224,
    HashAlgorithm.SHA256,
    HashAlgorithm.SHA384,
    HashAlgorithm.SHA512,
})

_ALIASES = {
    "3DES": "TRIPLEDES",
    "AES-128": "AES128",
    "AES-192": "AES192",
    "AES-256": "AES256",
    "SHA-1": "SHA1",
    "SHA-224": "SHA224",
    "SHA-256": "SHA256",
    "SHA-384": "SHA384",
    "SHA-512": "SHA512",
    "NONE": "UNCOMPRESSED",
    "BZIP2": "BZ2",
}

_DURATION_UNITS = {
    "": 1,
    "s": 1,
    "d": 86400,
    "w": 7 * 86400,
    "m": 30 * 86400,
    "y": 365 * 86400,
}


def algorithm_id(enum_cls: Type[IntEnum], value: Any) -> IntEnum:
    """Resolve an algorithm given by name ("AES256", "sha-256") or numeric id."""
    try:
        if isinstance(value, int):
            return enum_cls(value)
        text = str(value).strip().upper()
        if text.isdigit():
            return enum_cls(int(text))
    except ValueError:
        raise ValueError(f"Unknown {enum_cls.__name__}: {value}") from None

    text = _ALIASES.get(text, text)
    by_name = {name.upper(): member for name, member in enum_cls.__members__.items()}
    if text not in by_name:
        raise ValueError(f"Unknown {enum_cls.__name__}: {value}")
    return by_name[text]


def algorithm_list(enum_cls: Type[IntEnum], values: Any) -> List[IntEnum]:
    if isinstance(values, str):
        values = [v for v in values.split(",") if v.strip()]
    return [algorithm_id(enum_cls, v) for v in values]


def parse_expiry(value: Any) -> int:
    """
    Parse a key lifetime into seconds.

    Accepts an int, a digit string, or a gpg-style duration such as
    "365d", "2w", "6m" or "1y". Zero means the key never expires.
    """
    if isinstance(value, int):
        seconds = value
    else:
        m = re.fullmatch(r"\s*(\d+)\s*([sdwmy]?)\s*", str(value).lower())
        if not m:
            raise ValueError(f"Invalid key expiry: {value!r}")
        seconds = int(m.group(1)) * _DURATION_UNITS[m.group(2)]
    if seconds < 0 or seconds > MAX_KEY_LIFETIME:
        raise ValueError(f"Key expiry out of range: {seconds}")
    return seconds


@dataclass
class Preferences:
    """
    Ordered algorithm preferences written into each self-signature.

    Index 0 is the most preferred entry. A category left out of the
    constructor gets its default; an explicitly empty list drops the
    matching subpacket from the signature.
    """
    symmetric_ciphers: List[SymmetricKeyAlgorithm] = field(default_factory=lambda: list(DEFAULT_SYMMETRIC))
    hash_algorithms: List[HashAlgorithm] = field(default_factory=lambda: list(DEFAULT_HASHES))
    compression_algorithms: List[CompressionAlgorithm] = field(default_factory=lambda: list(DEFAULT_COMPRESSION))

    def __post_init__(self):
        self.symmetric_ciphers = algorithm_list(SymmetricKeyAlgorithm, self.symmetric_ciphers)
        self.hash_algorithms = algorithm_list(HashAlgorithm, self.hash_algorithms)
        self.compression_algorithms = algorithm_list(CompressionAlgorithm, self.compression_algorithms)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Preferences":
        kwargs = {}
        for key in ("symmetric_ciphers", "hash_algorithms", "compression_algorithms"):
            if data.get(key) is not None:
                kwargs[key] = data[key]
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "symmetric_ciphers": [v.name for v in self.symmetric_ciphers],
            "hash_algorithms": [v.name for v in self.hash_algorithms],
            "compression_algorithms": [v.name for v in self.compression_algorithms],
        }


@dataclass
class KeyConfig:
    expiry_seconds: int = 0
    rsa_bits: int = DEFAULT_RSA_BITS
    signature_hash: HashAlgorithm = HashAlgorithm.SHA256
    duplicate_identities: str = "pass"   # pass | dedupe | reject
    preferences: Preferences = field(default_factory=Preferences)

    def __post_init__(self):
        self.expiry_seconds = parse_expiry(self.expiry_seconds)
        self.signature_hash = algorithm_id(HashAlgorithm, self.signature_hash)
        if self.signature_hash not in SIGNATURE_HASHES:
            raise ValueError(f"Unsupported signature hash: {self.signature_hash.name}")
        if self.duplicate_identities not in DUPLICATE_POLICIES:
            raise ValueError(f"Unknown duplicate identity policy: {self.duplicate_identities}")
        if isinstance(self.preferences, dict):
            self.preferences = Preferences.from_dict(self.preferences)


def load_config(config: Optional[Dict[str, Any]] = None) -> KeyConfig:
    """
    Factory resolver for the key configuration.

    Recognized keys mirror the KeyConfig fields, plus the three preference
    lists at top level (symmetric_ciphers, hash_algorithms,
    compression_algorithms).
    """
    config = config or {}

    def pick(key: str, env: str, default: Any) -> Any:
        if config.get(key) is not None:
            return config[key]
        return os.getenv(env, default)

    preferences = Preferences.from_dict({
        "symmetric_ciphers": pick("symmetric_ciphers", "PGPMINT_PREFERRED_CIPHERS", None),
        "hash_algorithms": pick("hash_algorithms", "PGPMINT_PREFERRED_HASHES", None),
        "compression_algorithms": pick("compression_algorithms", "PGPMINT_PREFERRED_COMPRESSION", None),
    })

    return KeyConfig(
        expiry_seconds=pick("expiry_seconds", "PGPMINT_KEY_EXPIRY", 0),
        rsa_bits=int(pick("rsa_bits", "PGPMINT_RSA_BITS", DEFAULT_RSA_BITS)),
        signature_hash=pick("signature_hash", "PGPMINT_SIGNATURE_HASH", HashAlgorithm.SHA256),
        duplicate_identities=str(pick("duplicate_identities", "PGPMINT_DUPLICATE_IDENTITIES", "pass")).lower(),
        preferences=preferences,
    )
