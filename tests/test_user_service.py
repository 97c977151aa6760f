import pytest

from nexus.auth.passwords import verify_password
from nexus.auth.session import SessionStore
from nexus.core.errors import AuthenticationError, ConflictError, ValidationError
from nexus.services.user_service import change_password, list_users, login, logout, register, update_profile


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"phone": "  "}, "All fields are required"),
        ({"confirm_password": None}, "All fields are required"),
        ({"email": "jane.x.com"}, "Invalid email format"),
        ({"email": "jane@x"}, "Invalid email format"),
        ({"password": "short1!", "confirm_password": "short1!"}, "Password must be at least 8 characters long"),
        ({"confirm_password": "Passw0rd?"}, "Passwords do not match"),
    ],
)
def test_register_validation_messages(store, seed, jane_fields, overrides, message):
    with pytest.raises(ValidationError) as exc:
        register(store=store, seed=seed, fields={**jane_fields, **overrides})
    assert exc.value.message == message
    assert exc.value.status_code == 400
    assert len(store) == 0


def test_register_seeds_demo_data(store, seed, jane_fields):
    rec = register(store=store, seed=seed, fields=jane_fields)
    assert rec.password_hash != "Passw0rd!"
    assert verify_password(rec.password_hash, "Passw0rd!")
    stored = store.get("jane@x.com")
    assert set(stored.accounts) == {"checking", "savings"}
    assert [t.type for t in stored.transactions] == ["transfer", "deposit", "payment"]
    assert stored.role == "customer"


def test_register_duplicate(store, seed, jane_fields):
    register(store=store, seed=seed, fields=jane_fields)
    with pytest.raises(ConflictError) as exc:
        register(store=store, seed=seed, fields={**jane_fields, "email": "JANE@x.com"})
    assert exc.value.message == "User already exists"


def test_login_and_logout(store, seed, jane_fields):
    sessions = SessionStore()
    register(store=store, seed=seed, fields=jane_fields)
    user, sess = login(store=store, sessions=sessions, username="jane@x.com", password="Passw0rd!")
    assert user.email == "jane@x.com"
    assert sessions.resolve(sess.id).email == "jane@x.com"
    logout(sessions=sessions, session_id=sess.id)
    assert sessions.resolve(sess.id) is None


def test_login_inactive_user_is_invalid_credentials(store, seed, jane_fields):
    register(store=store, seed=seed, fields=jane_fields)
    store.update("jane@x.com", {"active": False})
    with pytest.raises(AuthenticationError) as exc:
        login(store=store, sessions=SessionStore(), username="jane@x.com", password="Passw0rd!")
    assert exc.value.message == "Invalid credentials"


def test_update_profile_ignores_blank_fields(store, seed, jane_fields):
    register(store=store, seed=seed, fields=jane_fields)
    update_profile(store=store, email="jane@x.com", fields={"address": "2 Side St", "last_name": None, "first_name": ""})
    rec = store.get("jane@x.com")
    assert (rec.first_name, rec.last_name, rec.address) == ("Jane", "Doe", "2 Side St")


@pytest.mark.parametrize(
    "current,new,confirm,message",
    [
        ("wrong-password", "NewPassw0rd", "NewPassw0rd", "Current password is incorrect"),
        (None, "NewPassw0rd", "NewPassw0rd", "Current password is incorrect"),
        ("Passw0rd!", "short", "short", "New password must be at least 8 characters long"),
        ("Passw0rd!", "NewPassw0rd", "NewPassw0rd?", "New passwords do not match"),
    ],
)
def test_change_password_failures_keep_digest(store, seed, jane_fields, current, new, confirm, message):
    register(store=store, seed=seed, fields=jane_fields)
    digest = store.get("jane@x.com").password_hash
    with pytest.raises(ValidationError) as exc:
        change_password(store=store, email="jane@x.com", current_password=current, new_password=new, confirm_password=confirm)
    assert exc.value.message == message
    assert store.get("jane@x.com").password_hash == digest


def test_list_users_hides_digest(store, seed, jane_fields):
    register(store=store, seed=seed, fields=jane_fields)
    users = list_users(store=store)
    assert [u["email"] for u in users] == ["jane@x.com"]
    assert all("password_hash" not in u for u in users)
