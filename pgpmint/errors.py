from __future__ import annotations


class PGPMintError(Exception):
    pass


class KeyGenerationFailed(PGPMintError):
    pass


class NoIdentities(PGPMintError):
    pass


class SigningFailed(PGPMintError):
    pass


class MalformedArmor(PGPMintError):
    pass


class MalformedPacket(PGPMintError):
    pass


class InvalidIdentity(PGPMintError, ValueError):
    pass


class DuplicateIdentity(InvalidIdentity):
    pass


class MissingPrivateKey(PGPMintError):
    pass


class UncertifiedEntity(PGPMintError):
    pass
