import pytest

from nexus.auth.passwords import hash_password, verify_password


def test_hash_is_not_plaintext_and_verifies():
    digest = hash_password("Passw0rd!")
    assert digest != "Passw0rd!"
    assert verify_password(digest, "Passw0rd!")
    assert not verify_password(digest, "passw0rd!")


def test_verify_with_empty_or_garbage_inputs():
    assert not verify_password("", "Passw0rd!")
    assert not verify_password(hash_password("Passw0rd!"), "")
    assert not verify_password("not-a-hash", "Passw0rd!")


def test_hash_rejects_empty_password():
    with pytest.raises(ValueError):
        hash_password("")


def test_equal_passwords_get_distinct_digests():
    a, b = hash_password("Passw0rd!"), hash_password("Passw0rd!")
    assert a != b
    assert verify_password(a, "Passw0rd!") and verify_password(b, "Passw0rd!")
