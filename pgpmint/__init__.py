"""
pgpmint
=======
Mint OpenPGP identities without shelling out to gpg.

Provides:
- RSA primary + encryption subkey generation (EntityGenerator)
- Self-signatures with lifetime and algorithm preferences (SelfCertifier)
- ASCII-armored public / private key blocks and their parser (ArmorCodec)
"""

from .certifier import SelfCertifier, verify_binding_signature, verify_entity, verify_self_signature
from .codec import ArmorCodec
from .config import KeyConfig, Preferences, load_config
from .errors import (
    PGPMintError, KeyGenerationFailed, NoIdentities, SigningFailed,
    MalformedArmor, MalformedPacket, InvalidIdentity, DuplicateIdentity,
    MissingPrivateKey, UncertifiedEntity,
)
from .generator import EntityGenerator
from .keygen import armor_private, armor_public, create_key
from .models import BindingSignature, Entity, Identity, KeyPair, SelfSignature, Subkey

__version__ = "0.1.0"

__all__ = [
    "ArmorCodec",
    "BindingSignature",
    "DuplicateIdentity",
    "Entity",
    "EntityGenerator",
    "Identity",
    "InvalidIdentity",
    "KeyConfig",
    "KeyGenerationFailed",
    "KeyPair",
    "MalformedArmor",
    "MalformedPacket",
    "MissingPrivateKey",
    "NoIdentities",
    "PGPMintError",
    "Preferences",
    "SelfCertifier",
    "SelfSignature",
    "SigningFailed",
    "Subkey",
    "UncertifiedEntity",
    "armor_private",
    "armor_public",
    "create_key",
    "load_config",
    "verify_binding_signature",
    "verify_entity",
    "verify_self_signature",
]
