import bcrypt
import pytest

from kcc.auth.passwords import hash_password, is_legacy_hash, verify_password


def test_hash_is_salted_argon2():
    a = hash_password("s3cret")
    b = hash_password("s3cret")
    assert a.startswith("$argon2")
    assert a != b
    assert verify_password(a, "s3cret")
    assert verify_password(b, "s3cret")


def test_wrong_or_empty_password_is_rejected():
    h = hash_password("s3cret")
    assert not verify_password(h, "S3cret")
    assert not verify_password(h, "")
    assert not verify_password("", "s3cret")


def test_empty_password_cannot_be_hashed():
    with pytest.raises(ValueError):
        hash_password("")


def test_legacy_bcrypt_hashes_still_verify():
    legacy = bcrypt.hashpw(b"old-site-pass", bcrypt.gensalt(rounds=4)).decode()
    assert is_legacy_hash(legacy)
    assert verify_password(legacy, "old-site-pass")
    assert not verify_password(legacy, "other")


def test_garbage_hash_does_not_raise():
    assert not verify_password("not-a-hash", "whatever")
    assert not verify_password("$2b$broken", "whatever")


def test_legacy_bcrypt_long_password_matches_first_72_bytes():
    long_pw = "kcc-" + "x" * 80
    legacy = bcrypt.hashpw(long_pw.encode()[:72], bcrypt.gensalt(rounds=4)).decode()
    assert verify_password(legacy, long_pw)
    assert not verify_password(legacy, "y" + long_pw[1:])
