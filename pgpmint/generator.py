from __future__ import annotations
from typing import Callable, Iterable, List, Optional, Tuple

from cryptography.hazmat.primitives.asymmetric import rsa

from .config import KeyConfig, load_config
from .crypto import load_rsa_key, rsa_generate
from .errors import DuplicateIdentity, KeyGenerationFailed, NoIdentities
from .logger import get_logger
from .models import Entity, Identity, KeyPair, Subkey, validate_identity
from .utils import format_fingerprint, now_epoch, to_datetime

log = get_logger("PGPMint.Generator")

KeyGen = Callable[[int], rsa.RSAPrivateKey]


class EntityGenerator:
    """
    Builds an uncertified Entity: one primary RSA key, one encryption
    subkey, and one Identity per (name, comment, email) triple.

    The key source is pluggable; it receives the configured key size and
    returns a cryptography RSA private key, which is then wrapped as a
    version 4 OpenPGP key.
    """

    def __init__(self, config: Optional[KeyConfig] = None, keygen: KeyGen = rsa_generate):
        self.config = config or load_config()
        self.keygen = keygen

    def generate(self, name: str, comment: str, email: str, created: Optional[int] = None) -> Entity:
        return self.generate_identities([(name, comment, email)], created=created)

    def generate_identities(self, uids: Iterable[Tuple[str, str, str]], created: Optional[int] = None) -> Entity:
        identities = self._identities(uids)
        created = now_epoch() if created is None else created

        primary = self._key_pair(created, "primary")
        subkey = self._key_pair(created, "subkey")

        entity = Entity(primary=primary, identities=identities, subkeys=[Subkey(subkey)])
        log.info(
            f"[KEYGEN] generated {self.config.rsa_bits}-bit RSA key {format_fingerprint(entity.fingerprint)} "
            f"| identities={len(identities)} subkey={subkey.fingerprint}"
        )
        return entity

    def _key_pair(self, created: int, role: str) -> KeyPair:
        try:
            private_key = self.keygen(self.config.rsa_bits)
            key = load_rsa_key(private_key, to_datetime(created), subkey=role == "subkey")
        except Exception as exc:
            log.error(f"[KEYGEN] {role} key generation failed: {exc}")
            raise KeyGenerationFailed(
                f"could not generate {self.config.rsa_bits}-bit RSA {role} key: {exc}"
            ) from exc
        return KeyPair(key)

    def _identities(self, uids: Iterable[Tuple[str, str, str]]) -> List[Identity]:
        policy = self.config.duplicate_identities
        identities: List[Identity] = []
        seen = set()
        for name, comment, email in uids:
            comment = comment or ""
            validate_identity(name, comment, email)
            identity = Identity(name=name, comment=comment, email=email)
            uid = identity.user_id
            if uid in seen:
                if policy == "reject":
                    raise DuplicateIdentity(f"duplicate user id: {uid}")
                if policy == "dedupe":
                    log.info(f"[KEYGEN] dropping duplicate user id: {uid}")
                    continue
                log.warning(f"[KEYGEN] duplicate user id kept: {uid}")
            seen.add(uid)
            identities.append(identity)

        if not identities:
            raise NoIdentities("at least one identity is required")
        return identities
