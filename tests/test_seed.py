from decimal import Decimal

import yaml

from nexus.auth.passwords import hash_password, verify_password
from nexus.infra.seed import bootstrap_store, load_seed


def test_packaged_seed_has_demo_data(seed):
    accounts = seed.new_accounts()
    assert accounts["checking"].balance == Decimal("455432.10")
    assert accounts["savings"].balance == Decimal("15678.90")
    assert [t.id for t in seed.new_transactions()] == ["T001", "T002", "T003"]
    assert seed.admin["email"] == "admin@nexusbank.com"


def test_new_accounts_are_independent(seed):
    a = seed.new_accounts()
    a["checking"].balance -= Decimal("1")
    assert seed.new_accounts()["checking"].balance == Decimal("455432.10")


def test_bootstrap_creates_admin_with_env_password(store, seed, monkeypatch):
    monkeypatch.setenv("NEXUS_ADMIN_PASSWORD", "S3cretAdmin")
    assert bootstrap_store(store, seed) == 1
    admin = store.get("admin@nexusbank.com")
    assert admin.role == "admin"
    assert verify_password(admin.password_hash, "S3cretAdmin")
    # Idempotent.
    assert bootstrap_store(store, seed) == 0


def test_bootstrap_loads_provisioned_users(store, tmp_path):
    path = tmp_path / "seed.yml"
    path.write_text(
        yaml.safe_dump(
            {
                "demo": {"accounts": {"checking": {"balance": 10, "number": "****0001", "type": "Checking"}}},
                "users": {
                    "Bob@X.com": {"first_name": "Bob", "password_hash": hash_password("Passw0rd!"), "active": False},
                    "nohash@x.com": {"first_name": "Nope"},
                },
            }
        ),
        encoding="utf-8",
    )
    seed = load_seed(path)
    assert bootstrap_store(store, seed) == 1
    bob = store.get("bob@x.com")
    assert bob.role == "customer"
    assert bob.active is False
    assert bob.accounts["checking"].balance == Decimal("10.00")
    assert not store.exists("nohash@x.com")


def test_missing_seed_file_is_empty(tmp_path):
    seed = load_seed(tmp_path / "absent.yml")
    assert seed.new_accounts() == {}
    assert seed.new_transactions() == []
