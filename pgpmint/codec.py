"""
pgpmint.codec
-------------
ArmorCodec turns a certified Entity into armored key blocks and back.

The certificate is composed fresh from the Entity on every encode, in
transferable key order (RFC 4880 11.1):

    primary key
    user id, self-signature       (per identity, declared order)
    subkey, binding signature     (per subkey)

pgpy serializes and armors it. encode_private() writes the private MPIs in
cleartext (s2k usage 0). No passphrase protection is applied; callers that
keep the output around are responsible for protecting it.
"""

from __future__ import annotations
import copy
import warnings
from typing import Dict, List, Optional

from pgpy import PGPKey
from pgpy.errors import PGPError

from .constants import PRIVATE_KEY_BLOCK, PUBLIC_KEY_BLOCK
from .crypto import bare_key
from .errors import MalformedArmor, MalformedPacket, MissingPrivateKey, UncertifiedEntity
from .logger import get_logger, log_warnings
from .models import Entity

log = get_logger("PGPMint.Armor")


def certificate(entity: Entity) -> PGPKey:
    """Compose a pgpy key from the Entity's key packets and signatures."""
    if not entity.identities:
        raise UncertifiedEntity(f"key {entity.fingerprint} has no identities")
    for identity in entity.identities:
        sig = identity.self_signature
        if sig is None or identity.uid is None:
            raise UncertifiedEntity(f"identity {identity.user_id!r} has no self-signature")
        if not sig.matches_signature() or identity.uid.userid != identity.user_id:
            raise UncertifiedEntity(f"identity {identity.user_id!r} was changed after it was signed")
    for subkey in entity.subkeys:
        sig = subkey.binding_signature
        if sig is None:
            raise UncertifiedEntity(f"subkey {subkey.fingerprint} has no binding signature")
        if not sig.matches_signature():
            raise UncertifiedEntity(f"binding signature of {subkey.fingerprint} was changed after it was signed")

    cert = bare_key(entity.primary.key)
    for identity in entity.identities:
        cert |= copy.copy(identity.uid)
    for subkey in entity.subkeys:
        sub = bare_key(subkey.key_pair.key)
        sub |= copy.copy(subkey.binding_signature.signature)
        cert |= sub
    return cert


class ArmorCodec:
    def __init__(self, headers: Optional[Dict[str, str]] = None):
        self.headers = dict(headers or {})

    def _armor(self, key: PGPKey) -> str:
        key.ascii_headers.update(self.headers)
        # pgpy ends the block with a newline; the END line closes it here
        return str(key).rstrip("\n")

    def encode_public(self, entity: Entity) -> str:
        cert = certificate(entity)
        text = self._armor(cert.pubkey)
        log.info(f"[ARMOR] public key block for {entity.fingerprint} ({len(text)} chars)")
        return text

    def encode_private(self, entity: Entity) -> str:
        if not entity.has_private:
            raise MissingPrivateKey(f"key {entity.fingerprint} is missing private material")
        cert = certificate(entity)
        log.warning(f"[ARMOR] private key block for {entity.fingerprint} is not passphrase protected")
        return self._armor(cert)

    def decode(self, text: str) -> Entity:
        entities = self.decode_keyring(text)
        if len(entities) != 1:
            raise MalformedPacket(f"expected one key in armor, found {len(entities)}")
        return entities[0]

    def decode_keyring(self, text: str) -> List[Entity]:
        block_type, body = self._unarmor(text)

        try:
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always")
                _, keys = PGPKey.from_blob(body)
        except Exception as exc:
            raise MalformedPacket(f"could not parse key packets: {exc}") from exc
        log_warnings(log, caught)

        if not keys:
            raise MalformedPacket("no primary key packet found")

        secret = block_type == PRIVATE_KEY_BLOCK
        entities = []
        for key in keys.values():
            if secret and key.is_public:
                raise MalformedPacket(f"private key block for {key.fingerprint} holds no secret key")
            if not secret and not key.is_public:
                raise MalformedPacket(f"public key block for {key.fingerprint} carries secret key material")
            if not key.userids:
                raise MalformedPacket(f"key {key.fingerprint} has no user id")
            entities.append(Entity.from_key(key))

        log.debug(f"[ARMOR] decoded {len(entities)} key(s) from {block_type}")
        return entities

    @staticmethod
    def _unarmor(text: str):
        try:
            with warnings.catch_warnings():
                # checksum mismatches only warn in pgpy; checked below
                warnings.simplefilter("ignore")
                parts = PGPKey.ascii_unarmor(text)
        except (ValueError, TypeError, PGPError) as exc:
            raise MalformedArmor(f"not an armored key block: {exc}") from exc

        block_type = parts["magic"]
        if block_type not in (PUBLIC_KEY_BLOCK, PRIVATE_KEY_BLOCK):
            raise MalformedArmor(f"unexpected armor block type {block_type!r}")
        if parts["crc"] is None or PGPKey.crc24(parts["body"]) != parts["crc"]:
            raise MalformedArmor("armor checksum mismatch")
        return block_type, bytes(parts["body"])
