import pytest
from pgpy.constants import CompressionAlgorithm, HashAlgorithm, SymmetricKeyAlgorithm

from pgpmint.config import KeyConfig, Preferences, load_config, parse_expiry, algorithm_id

ENV_KEYS = [
    "PGPMINT_KEY_EXPIRY", "PGPMINT_RSA_BITS", "PGPMINT_SIGNATURE_HASH",
    "PGPMINT_DUPLICATE_IDENTITIES", "PGPMINT_PREFERRED_CIPHERS", "PGPMINT_PREFERRED_HASHES",
    "PGPMINT_PREFERRED_COMPRESSION",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_default_preferences():
    prefs = Preferences()
    assert prefs.symmetric_ciphers == [9, 8, 7, 3, 2]
    assert prefs.hash_algorithms == [8, 2, 9, 10, 11]
    assert prefs.compression_algorithms == [2, 1]
    assert prefs.to_dict()["compression_algorithms"] == ["ZLIB", "ZIP"]


def test_preferences_keep_order_and_duplicates():
    prefs = Preferences(symmetric_ciphers=["CAST5", "aes256", "CAST5"])
    assert prefs.symmetric_ciphers == [
        SymmetricKeyAlgorithm.CAST5, SymmetricKeyAlgorithm.AES256, SymmetricKeyAlgorithm.CAST5,
    ]
    # untouched categories keep their defaults
    assert prefs.hash_algorithms == [8, 2, 9, 10, 11]


def test_algorithm_names():
    assert algorithm_id(SymmetricKeyAlgorithm, "3DES") == SymmetricKeyAlgorithm.TripleDES
    assert algorithm_id(SymmetricKeyAlgorithm, "tripledes") == SymmetricKeyAlgorithm.TripleDES
    assert algorithm_id(HashAlgorithm, "sha-256") == HashAlgorithm.SHA256
    assert algorithm_id(CompressionAlgorithm, "2") == CompressionAlgorithm.ZLIB
    assert algorithm_id(CompressionAlgorithm, "none") == CompressionAlgorithm.Uncompressed
    with pytest.raises(ValueError):
        algorithm_id(SymmetricKeyAlgorithm, "ROT13")
    with pytest.raises(ValueError):
        algorithm_id(HashAlgorithm, 99)


def test_parse_expiry():
    assert parse_expiry(0) == 0
    assert parse_expiry("3600") == 3600
    assert parse_expiry("365d") == 365 * 24 * 3600
    assert parse_expiry("1y") == 365 * 24 * 3600
    assert parse_expiry("2w") == 14 * 24 * 3600
    for bad in ("soon", -1, 2 ** 32, "10x"):
        with pytest.raises(ValueError):
            parse_expiry(bad)


def test_load_config_defaults(clean_env):
    cfg = load_config()
    assert cfg.expiry_seconds == 0
    assert cfg.rsa_bits == 2048
    assert cfg.signature_hash == HashAlgorithm.SHA256
    assert cfg.duplicate_identities == "pass"
    assert cfg.preferences == Preferences()


def test_load_config_from_env(clean_env):
    clean_env.setenv("PGPMINT_KEY_EXPIRY", "30d")
    clean_env.setenv("PGPMINT_RSA_BITS", "3072")
    clean_env.setenv("PGPMINT_SIGNATURE_HASH", "SHA512")
    clean_env.setenv("PGPMINT_DUPLICATE_IDENTITIES", "Reject")
    clean_env.setenv("PGPMINT_PREFERRED_CIPHERS", "AES256,CAST5")
    clean_env.setenv("PGPMINT_PREFERRED_COMPRESSION", "")

    cfg = load_config()
    assert cfg.expiry_seconds == 30 * 86400
    assert cfg.rsa_bits == 3072
    assert cfg.signature_hash == HashAlgorithm.SHA512
    assert cfg.duplicate_identities == "reject"
    assert cfg.preferences.symmetric_ciphers == [SymmetricKeyAlgorithm.AES256, SymmetricKeyAlgorithm.CAST5]
    assert cfg.preferences.compression_algorithms == []


def test_dict_overrides_env(clean_env):
    clean_env.setenv("PGPMINT_RSA_BITS", "4096")
    cfg = load_config({"rsa_bits": 1024, "hash_algorithms": ["SHA1"]})
    assert cfg.rsa_bits == 1024
    assert cfg.preferences.hash_algorithms == [HashAlgorithm.SHA1]


def test_invalid_config_values():
    with pytest.raises(ValueError):
        KeyConfig(duplicate_identities="merge")
    with pytest.raises(ValueError):
        KeyConfig(signature_hash="MD5")
    with pytest.raises(ValueError):
        KeyConfig(expiry_seconds=-5)
