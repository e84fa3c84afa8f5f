"""
pgpmint.crypto
--------------
Primitive provider for pgpmint:

- RSA key generation via cryptography (OS entropy)
- Wrapping a generated key as a version 4 OpenPGP key packet (pgpy)
- Stripping a pgpy key down to its bare key packet

Callers that need a different key source pass their own generator with
the same signature as rsa_generate to EntityGenerator.
"""

from __future__ import annotations
import copy
from datetime import datetime

from cryptography.hazmat.primitives.asymmetric import rsa
from pgpy import PGPKey
from pgpy.constants import PubKeyAlgorithm
from pgpy.packet import PrivKeyV4, PrivSubKeyV4
from pgpy.packet.types import MPI


# --------- RSA (generate) ----------
def rsa_generate(bits: int) -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=bits)


# --------- OpenPGP key packets ----------
def load_rsa_key(private_key: rsa.RSAPrivateKey, created: datetime, subkey: bool = False) -> PGPKey:
    """Wrap an RSA private key as an unprotected pgpy primary key or subkey."""
    numbers = private_key.private_numbers()
    packet = PrivSubKeyV4() if subkey else PrivKeyV4()
    packet.pkalg = PubKeyAlgorithm.RSAEncryptOrSign

    material = packet.keymaterial
    material.n = MPI(numbers.public_numbers.n)
    material.e = MPI(numbers.public_numbers.e)
    material.d = MPI(numbers.d)
    material.p = MPI(numbers.p)
    material.q = MPI(numbers.q)
    # OpenPGP wants u = p^-1 mod q; rsa_crt_iqmp(q, p) computes exactly that
    material.u = MPI(rsa.rsa_crt_iqmp(numbers.q, numbers.p))
    material._compute_chksum()

    packet.created = created
    packet.update_hlen()
    return PGPKey() | packet


def bare_key(key: PGPKey, public: bool = False) -> PGPKey:
    """Copy of the key packet alone: no user ids, subkeys or signatures."""
    packet = key._key
    if public and not key.is_public:
        return PGPKey() | packet.pubkey()
    return PGPKey() | copy.copy(packet)
