import base64

import pytest
from pgpy import PGPKey

from pgpmint.certifier import SelfCertifier
from pgpmint.codec import ArmorCodec
from pgpmint.config import KeyConfig
from pgpmint.errors import MalformedArmor, MalformedPacket
from pgpmint.generator import EntityGenerator

PUBLIC = "PUBLIC KEY BLOCK"
PRIVATE = "PRIVATE KEY BLOCK"


@pytest.fixture(scope="module")
def cfg():
    return KeyConfig(rsa_bits=1024)


@pytest.fixture(scope="module")
def joe(cfg):
    shell = EntityGenerator(cfg).generate("Joe", "", "joe@example.com")
    return SelfCertifier(cfg).certify(shell, expiry_seconds="1y")


@pytest.fixture(scope="module")
def ann(cfg):
    shell = EntityGenerator(cfg).generate("Ann", "", "ann@example.com")
    return SelfCertifier(cfg).certify(shell)


def _body(text):
    return bytes(PGPKey.ascii_unarmor(text)["body"])


def _block(data, block_type=PUBLIC):
    """Armor raw packet bytes under any block label, with a correct checksum."""
    payload = base64.b64encode(data).decode("ascii")
    lines = [payload[i:i + 64] for i in range(0, len(payload), 64)]
    crc = base64.b64encode(PGPKey.crc24(bytearray(data)).to_bytes(3, "big")).decode("ascii")
    return "\n".join(
        [f"-----BEGIN PGP {block_type}-----", ""] + lines + ["=" + crc, f"-----END PGP {block_type}-----"]
    )


def test_envelope_layout(joe):
    text = ArmorCodec().encode_public(joe)
    lines = text.split("\n")
    assert lines[0] == "-----BEGIN PGP PUBLIC KEY BLOCK-----"
    assert lines[1] == ""
    assert all(len(l) <= 64 for l in lines[2:-2])
    assert lines[-2].startswith("=") and len(lines[-2]) == 5
    assert lines[-1] == "-----END PGP PUBLIC KEY BLOCK-----"


def test_decode_with_noise(joe):
    text = ArmorCodec().encode_public(joe)
    noisy = "some preamble\r\n" + text.replace("\n", "\r\n") + "\r\ntrailing text\r\n"
    assert ArmorCodec().decode(noisy).fingerprint == joe.fingerprint


def test_checksum_mismatch(joe):
    lines = ArmorCodec().encode_public(joe).split("\n")
    crc = lines[-2]
    lines[-2] = "=" + ("AAAA" if crc[1:] != "AAAA" else "BBBB")
    with pytest.raises(MalformedArmor):
        ArmorCodec().decode("\n".join(lines))


@pytest.mark.parametrize("mutate", [
    lambda t: t.replace("-----BEGIN PGP PUBLIC KEY BLOCK-----", ""),
    lambda t: t.replace("-----END PGP PUBLIC KEY BLOCK-----", ""),
    lambda t: t.replace("-----END PGP PUBLIC KEY BLOCK-----", "-----END PGP PRIVATE KEY BLOCK-----"),
    lambda t: "\n".join(l for l in t.split("\n") if not (l.startswith("=") and len(l) == 5)),
    lambda t: t.replace("\n\n", "\nnot a header\n\n"),
    lambda t: t.replace("\n\n", "\n\n!"),
    lambda t: t.replace("PUBLIC KEY BLOCK", "SIGNATURE"),
    lambda t: "",
])
def test_malformed_envelopes(joe, mutate):
    text = ArmorCodec().encode_public(joe)
    with pytest.raises(MalformedArmor):
        ArmorCodec().decode(mutate(text))


def test_keyring_decode(joe, ann):
    codec = ArmorCodec()
    text = _block(_body(codec.encode_public(joe)) + _body(codec.encode_public(ann)))

    keys = codec.decode_keyring(text)
    assert [k.fingerprint for k in keys] == [joe.fingerprint, ann.fingerprint]
    assert [k.identities[0].name for k in keys] == ["Joe", "Ann"]
    with pytest.raises(MalformedPacket):
        codec.decode(text)


def test_public_block_with_secret_packets_rejected(joe):
    data = _body(ArmorCodec().encode_private(joe))
    with pytest.raises(MalformedPacket):
        ArmorCodec().decode(_block(data, PUBLIC))


def test_private_block_without_secret_key_rejected(joe):
    data = _body(ArmorCodec().encode_public(joe))
    with pytest.raises(MalformedPacket):
        ArmorCodec().decode(_block(data, PRIVATE))


def test_key_without_user_id_rejected(cfg):
    shell = EntityGenerator(cfg).generate("Joe", "", "joe@example.com")
    data = bytes(shell.primary.key.pubkey)
    with pytest.raises(MalformedPacket):
        ArmorCodec().decode(_block(data))


def test_signature_only_stream_rejected(joe):
    sig = joe.identities[0].self_signature.signature
    with pytest.raises(MalformedPacket):
        ArmorCodec().decode(_block(bytes(sig)))


def test_user_id_before_key_rejected(joe):
    uid = joe.identities[0].uid
    with pytest.raises(MalformedPacket):
        ArmorCodec().decode(_block(bytes(uid._uid)))
