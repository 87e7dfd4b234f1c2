"""Tests for the UserRecord projection."""
from admin_api.core.clerk import UserRecord
from conftest import make_user


def test_primary_address_moves_first():
    data = make_user("user_1", "old@example.com", extra_emails=("primary@example.com",))
    data["primary_email_address_id"] = "idn_user_1_1"

    record = UserRecord.from_api(data)

    assert record.email_addresses == ("primary@example.com", "old@example.com")
    assert record.primary_email == "primary@example.com"
    assert record.primary_email_address_id == "idn_user_1_1"


def test_flags_and_summary():
    data = make_user("user_1", "a@example.com", first_name="Ann", banned=True, password_enabled=False, verified=False)

    record = UserRecord.from_api(data)

    assert record.banned is True
    assert record.password_enabled is False
    assert record.summary() == {
        "id": "user_1",
        "email": "a@example.com",
        "firstName": "Ann",
        "lastName": "User",
        "emailVerified": False,
    }


def test_user_without_email_addresses():
    record = UserRecord.from_api({"id": "user_2"})

    assert record.email_addresses == ()
    assert record.primary_email is None
    assert record.primary_email_address_id is None
    assert record.password_enabled is False


def test_raw_is_the_untouched_representation():
    data = make_user("user_1", "a@example.com")

    record = UserRecord.from_api(data)

    assert record.raw is data
    assert record == UserRecord.from_api(dict(data, object="changed"))
