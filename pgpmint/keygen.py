"""
One-call key creation, roughly what `gpg --gen-key` produces:

- RSA primary key (certify + sign) and RSA encryption subkey
- positive self-signature with lifetime and algorithm preferences
- subkey binding signature with the same lifetime

Differences from gpg output: no Bzip2 in the compression preferences,
no keyserver-preference subpacket, and the signature digest defaults to
SHA-256.
"""

from __future__ import annotations
from typing import Optional

from .certifier import SelfCertifier
from .codec import ArmorCodec
from .config import KeyConfig, load_config
from .crypto import rsa_generate
from .generator import EntityGenerator
from .models import Entity


def create_key(name: str, comment: str, email: str, config: Optional[KeyConfig] = None,
               keygen=rsa_generate) -> Entity:
    config = config or load_config()
    entity = EntityGenerator(config, keygen).generate(name, comment, email)
    return SelfCertifier(config).certify(entity)

def armor_public(entity: Entity) -> str:
    """Public part of the key in armor format."""
    return ArmorCodec().encode_public(entity)

def armor_private(entity: Entity) -> str:
    """Private part of the key in armor format (unprotected)."""
    return ArmorCodec().encode_private(entity)
