"""
pgpmint.certifier
-----------------
Self-certification of a generated Entity.

Every identity gets a positive certification (0x13) carrying key lifetime,
key flags and the ordered algorithm preferences; every subkey gets a
subkey binding signature (0x18) with the same lifetime. pgpy builds and
signs both with the primary private key: creation time and issuer
fingerprint go in the hashed area, the issuer key id in the unhashed area.

certify() never touches the Entity it is given. It signs copies of the key
packets and returns a new, fully certified Entity, or raises before
anything is attached.
"""

from __future__ import annotations
from datetime import timedelta
from typing import Optional
import warnings

from pgpy import PGPKey, PGPSignature, PGPUID
from pgpy.constants import SignatureType

from .config import KeyConfig, Preferences, load_config, parse_expiry
from .constants import PRIMARY_USAGE, SUBKEY_USAGE
from .crypto import bare_key
from .errors import NoIdentities, SigningFailed
from .logger import get_logger, log_warnings
from .models import Entity, Identity, KeyPair, SelfSignature, Subkey
from .utils import now_epoch, to_datetime

log = get_logger("PGPMint.Certifier")


class SelfCertifier:
    def __init__(self, config: Optional[KeyConfig] = None):
        self.config = config or load_config()

    def certify(
        self,
        entity: Entity,
        expiry_seconds: Optional[int] = None,
        preferences: Optional[Preferences] = None,
        created: Optional[int] = None,
    ) -> Entity:
        if not entity.identities:
            raise NoIdentities("entity has no identities to certify")
        if not entity.primary.has_private:
            raise SigningFailed(f"primary key {entity.fingerprint} has no private material")

        expiry = self.config.expiry_seconds if expiry_seconds is None else parse_expiry(expiry_seconds)
        prefs = self.config.preferences if preferences is None else preferences
        if isinstance(prefs, dict):
            prefs = Preferences.from_dict(prefs)
        when = to_datetime(now_epoch() if created is None else created)

        try:
            with warnings.catch_warnings(record=True) as caught:
                warnings.simplefilter("always")
                primary, uids, subkeys = self._sign_all(entity, expiry, prefs, when)
        except Exception as exc:
            log.error(f"[CERTIFY] signing failed for {entity.fingerprint}: {exc}")
            raise SigningFailed(f"could not sign with {entity.fingerprint}: {exc}") from exc
        log_warnings(log, caught)

        # views follow the declared identity order, not pgpy's sorted user id list
        identities = [
            Identity(i.name, i.comment, i.email, SelfSignature.from_pgp(uid.selfsig), uid)
            for i, uid in zip(entity.identities, uids)
        ]
        bound = [Subkey.from_key(sub) for sub in subkeys]

        log.info(
            f"[CERTIFY] {entity.fingerprint} | identities={len(identities)} "
            f"subkeys={len(bound)} lifetime={expiry}s"
        )
        return Entity(primary=KeyPair(primary), identities=identities, subkeys=bound)

    def _sign_all(self, entity: Entity, expiry: int, prefs: Preferences, when):
        halg = self.config.signature_hash
        lifetime = timedelta(seconds=expiry) if expiry else None
        primary = bare_key(entity.primary.key)

        uids = []
        for index, identity in enumerate(entity.identities):
            uid = PGPUID.new(identity.name, comment=identity.comment, email=identity.email)
            primary.add_uid(
                uid,
                usage=set(PRIMARY_USAGE),
                hash=halg,
                # pgpy writes an empty subpacket for [], so empty lists go in as None
                ciphers=list(prefs.symmetric_ciphers) or None,
                hashes=list(prefs.hash_algorithms) or None,
                compression=list(prefs.compression_algorithms) or None,
                key_expiration=lifetime,
                primary=True if index == 0 else None,
                created=when,
            )
            uids.append(uid)

        subkeys = []
        for subkey in entity.subkeys:
            sub = bare_key(subkey.key_pair.key)
            primary |= sub
            # PGPKey.bind() has no key lifetime option, so the binding is assembled here
            sig = PGPSignature.new(
                SignatureType.Subkey_Binding, primary.key_algorithm, halg,
                primary.fingerprint.keyid, created=when,
            )
            sig._signature.subpackets.addnew("KeyFlags", hashed=True, flags=set(SUBKEY_USAGE))
            if lifetime is not None:
                sig._signature.subpackets.addnew("KeyExpirationTime", hashed=True, expires=lifetime)
            sub |= primary._sign(sub, sig)
            subkeys.append(sub)

        return primary, uids, subkeys


# --------- Verification ----------
def _verified(signer: PGPKey, subject, sig: PGPSignature) -> bool:
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            return bool(signer.verify(subject, sig))
    except Exception:
        return False

def verify_self_signature(entity: Entity, identity: Identity) -> bool:
    sig = identity.self_signature
    if sig is None or not sig.matches_signature() or sig.issuer_fingerprint != entity.fingerprint:
        return False
    # hash the user id the view claims, not whatever uid object it carries
    signer = bare_key(entity.primary.key, public=True)
    uid = PGPUID.new(identity.name, comment=identity.comment, email=identity.email)
    signer |= uid
    return _verified(signer, uid, sig.signature)

def verify_binding_signature(entity: Entity, subkey: Subkey) -> bool:
    sig = subkey.binding_signature
    if sig is None or not sig.matches_signature() or sig.issuer_fingerprint != entity.fingerprint:
        return False
    signer = bare_key(entity.primary.key, public=True)
    sub = bare_key(subkey.key_pair.key, public=True)
    signer |= sub
    return _verified(signer, sub, sig.signature)

def verify_entity(entity: Entity) -> bool:
    if not entity.identities:
        return False
    return (
        all(verify_self_signature(entity, i) for i in entity.identities)
        and all(verify_binding_signature(entity, s) for s in entity.subkeys)
    )
