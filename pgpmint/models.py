# pgpmint/models.py
"""
In-memory model of a transferable OpenPGP key.

Entity
 ├── primary: KeyPair                 (certify + sign)
 ├── identities: [Identity]           each with one SelfSignature
 └── subkeys: [Subkey]                each with one BindingSignature

KeyPair wraps a pgpy PGPKey. Signature views are frozen snapshots of the
fields read out of a pgpy PGPSignature; the PGPSignature itself rides
along (excluded from comparison) so the codec can write it back verbatim.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pgpy import PGPKey, PGPSignature, PGPUID
from pgpy.constants import HashAlgorithm, SignatureType

from .constants import PRIMARY_USAGE, SUBKEY_USAGE, flag_mask
from .errors import InvalidIdentity
from .utils import to_epoch

_FORBIDDEN = set("()<>")


@dataclass(eq=False)
class KeyPair:
    key: PGPKey = field(repr=False)

    @property
    def has_private(self) -> bool:
        return not self.key.is_public

    def public_only(self) -> "KeyPair":
        return KeyPair(self.key.pubkey)

    @property
    def fingerprint(self) -> str:
        return str(self.key.fingerprint)

    @property
    def key_id(self) -> str:
        return self.key.fingerprint.keyid

    @property
    def created(self) -> int:
        return to_epoch(self.key.created)

    @property
    def bits(self) -> int:
        return self.key.key_size

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, KeyPair):
            return NotImplemented
        return self.fingerprint == other.fingerprint

    def __hash__(self) -> int:
        return hash(self.fingerprint)

    def __repr__(self) -> str:
        kind = "private" if self.has_private else "public"
        return f"KeyPair({self.fingerprint}, {kind})"


@dataclass(frozen=True)
class Signature:
    sig_type: int = SignatureType.Positive_Cert
    issuer_fingerprint: str = ""
    issuer_key_id: str = ""
    created: int = 0
    key_lifetime: int = 0                 # seconds after key creation; 0 = never expires
    key_flags: int = 0
    hash_algorithm: int = HashAlgorithm.SHA256
    hash_prefix: bytes = b""
    value: bytes = field(default=b"", repr=False)
    signature: Optional[PGPSignature] = field(default=None, compare=False, repr=False)

    def expires_at(self, key_created: int) -> Optional[int]:
        if not self.key_lifetime:
            return None
        return key_created + self.key_lifetime

    def matches_signature(self) -> bool:
        """False when the view was edited after signing (dataclasses.replace) or never signed."""
        return self.signature is not None and self == type(self).from_pgp(self.signature)

    @staticmethod
    def _fields(sig: PGPSignature) -> Dict[str, Any]:
        lifetime = sig.key_expiration
        return dict(
            sig_type=sig.type,
            issuer_fingerprint=str(sig.signer_fingerprint),
            issuer_key_id=sig.signer or "",
            created=to_epoch(sig.created),
            key_lifetime=int(lifetime.total_seconds()) if lifetime is not None else 0,
            key_flags=flag_mask(sig.key_flags),
            hash_algorithm=sig.hash_algorithm,
            hash_prefix=bytes(sig.hash2),
            value=bytes(sig.__sig__),
            signature=sig,
        )

    @classmethod
    def from_pgp(cls, sig: PGPSignature) -> "Signature":
        return cls(**cls._fields(sig))


@dataclass(frozen=True)
class SelfSignature(Signature):
    """Positive certification binding a user id to the primary key."""
    key_flags: int = flag_mask(PRIMARY_USAGE)
    symmetric_ciphers: List[int] = field(default_factory=list)
    hash_algorithms: List[int] = field(default_factory=list)
    compression_algorithms: List[int] = field(default_factory=list)
    primary_user_id: bool = False

    @staticmethod
    def _fields(sig: PGPSignature) -> Dict[str, Any]:
        fields = Signature._fields(sig)
        primary = next(iter(sig._signature.subpackets["h_PrimaryUserID"]), None)
        fields.update(
            symmetric_ciphers=list(sig.cipherprefs),
            hash_algorithms=list(sig.hashprefs),
            compression_algorithms=list(sig.compprefs),
            primary_user_id=bool(primary),
        )
        return fields


@dataclass(frozen=True)
class BindingSignature(Signature):
    """Subkey binding signature made by the primary key."""
    sig_type: int = SignatureType.Subkey_Binding
    key_flags: int = flag_mask(SUBKEY_USAGE)


def format_user_id(name: str, comment: str = "", email: str = "") -> str:
    uid = name
    if comment:
        uid += f" ({comment})"
    if email:
        uid += f" <{email}>"
    return uid


def validate_identity(name: str, comment: str, email: str) -> None:
    if not name or not name.strip():
        raise InvalidIdentity("identity name must not be empty")
    if not email or not email.strip():
        raise InvalidIdentity("identity email must not be empty")
    for label, value in (("name", name), ("comment", comment), ("email", email)):
        if _FORBIDDEN.intersection(value):
            raise InvalidIdentity(f"identity {label} contains a forbidden character: {value!r}")
        if any(ord(c) < 0x20 or ord(c) == 0x7F for c in value):
            raise InvalidIdentity(f"identity {label} contains a control character: {value!r}")
        # the user id splits on single spaces, so edge whitespace cannot survive a round trip
        if value != value.strip():
            raise InvalidIdentity(f"identity {label} has leading or trailing whitespace: {value!r}")


@dataclass
class Identity:
    name: str
    comment: str = ""
    email: str = ""
    self_signature: Optional[SelfSignature] = None
    uid: Optional[PGPUID] = field(default=None, compare=False, repr=False)

    @property
    def user_id(self) -> str:
        return format_user_id(self.name, self.comment, self.email)

    @classmethod
    def from_uid(cls, uid: PGPUID) -> "Identity":
        sig = uid.selfsig
        return cls(
            name=uid.name,
            comment=uid.comment,
            email=uid.email,
            self_signature=SelfSignature.from_pgp(sig) if sig is not None else None,
            uid=uid,
        )


@dataclass
class Subkey:
    key_pair: KeyPair
    binding_signature: Optional[BindingSignature] = None

    @property
    def fingerprint(self) -> str:
        return self.key_pair.fingerprint

    @classmethod
    def from_key(cls, subkey: PGPKey) -> "Subkey":
        sig = next(iter(subkey.self_signatures), None)
        return cls(KeyPair(subkey), BindingSignature.from_pgp(sig) if sig is not None else None)


@dataclass(eq=False)
class Entity:
    primary: KeyPair
    identities: List[Identity] = field(default_factory=list)
    subkeys: List[Subkey] = field(default_factory=list)

    @property
    def fingerprint(self) -> str:
        return self.primary.fingerprint

    @property
    def key_id(self) -> str:
        return self.primary.key_id

    @property
    def has_private(self) -> bool:
        return self.primary.has_private and all(s.key_pair.has_private for s in self.subkeys)

    @property
    def is_certified(self) -> bool:
        return (
            bool(self.identities)
            and all(i.self_signature is not None for i in self.identities)
            and all(s.binding_signature is not None for s in self.subkeys)
        )

    @property
    def primary_identity(self) -> Optional[Identity]:
        for identity in self.identities:
            if identity.self_signature is not None and identity.self_signature.primary_user_id:
                return identity
        return self.identities[0] if self.identities else None

    def public_view(self) -> "Entity":
        """Copy of this entity with every private key dropped."""
        return Entity(
            primary=self.primary.public_only(),
            identities=list(self.identities),
            subkeys=[Subkey(s.key_pair.public_only(), s.binding_signature) for s in self.subkeys],
        )

    @classmethod
    def from_key(cls, key: PGPKey) -> "Entity":
        """View over a parsed pgpy key; the key keeps its user ids alive."""
        return cls(
            primary=KeyPair(key),
            identities=[Identity.from_uid(uid) for uid in key.userids],
            subkeys=[Subkey.from_key(sub) for sub in key.subkeys.values()],
        )
