"""Tests for AccountService registration and login."""

import sqlite3
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from flickhub.auth import AccountService, make_password_context
from flickhub.auth.crud import count_users, get_user_by_login
from flickhub.db import Database, init_db
from flickhub.errors import AuthError, ConflictError, InternalError, ValidationError


ALICE = {
    "user_id": "alice1",
    "name": "Alice",
    "email": "a@x.com",
    "phone": "5551234",
    "password": "longenough",
}


class AccountServiceTestCase(unittest.TestCase):
    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.db = Database(str(Path(tmp.name) / "test.sqlite"), pool_size=2)
        self.addCleanup(self.db.close)
        init_db(self.db)
        self.accounts = AccountService(self.db, password_context=make_password_context(1000))

    def user_count(self) -> int:
        with self.db.connection() as conn:
            return count_users(conn)


class TestRegister(AccountServiceTestCase):
    def test_creates_single_row_with_hashed_password(self):
        result = self.accounts.register(**ALICE)

        assert result == {"userId": "alice1"}
        assert self.user_count() == 1
        with self.db.connection() as conn:
            row = get_user_by_login(conn, "alice1")
        assert row["password_hash"] != "longenough"
        assert "longenough" not in row["password_hash"]
        assert row["name"] == "Alice"
        assert row["created_at"].endswith("Z")

    def test_result_never_contains_password_or_hash(self):
        result = self.accounts.register(**ALICE)
        with self.db.connection() as conn:
            stored_hash = get_user_by_login(conn, "alice1")["password_hash"]

        values = list(result.values())
        assert "longenough" not in values
        assert stored_hash not in values

    def test_missing_field_is_rejected(self):
        for field in ALICE:
            with self.subTest(field=field):
                data = dict(ALICE, **{field: ""})
                with self.assertRaises(ValidationError) as ctx:
                    self.accounts.register(**data)
                assert ctx.exception.message == "All fields are required."
        assert self.user_count() == 0

    def test_none_field_is_rejected(self):
        with self.assertRaises(ValidationError):
            self.accounts.register(**dict(ALICE, phone=None))

    def test_short_user_id_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            self.accounts.register(**dict(ALICE, user_id="abc"))
        assert ctx.exception.message == "Invalid User ID."
        assert self.user_count() == 0

    def test_user_id_with_whitespace_is_rejected(self):
        for user_id in ("ali ce", "alice\t1", " alice"):
            with self.subTest(user_id=user_id):
                with self.assertRaises(ValidationError):
                    self.accounts.register(**dict(ALICE, user_id=user_id))
        assert self.user_count() == 0

    def test_four_character_user_id_is_accepted(self):
        assert self.accounts.register(**dict(ALICE, user_id="abcd")) == {"userId": "abcd"}

    def test_short_password_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            self.accounts.register(**dict(ALICE, password="1234567"))
        assert ctx.exception.message == "Password too short."
        assert self.user_count() == 0

    def test_duplicate_user_id_conflicts(self):
        self.accounts.register(**ALICE)
        with self.assertRaises(ConflictError):
            self.accounts.register(**dict(ALICE, email="other@x.com"))
        assert self.user_count() == 1

    def test_duplicate_email_conflicts(self):
        self.accounts.register(**ALICE)
        with self.assertRaises(ConflictError) as ctx:
            self.accounts.register(**dict(ALICE, user_id="alice2"))
        assert ctx.exception.message == "User ID or email already exists."
        assert self.user_count() == 1

    def test_store_constraint_race_maps_to_conflict(self):
        """A registration that passes the pre-check but loses at insert time."""
        self.accounts.register(**ALICE)
        with patch("flickhub.auth.service.find_user_by_id_or_email", return_value=None):
            with self.assertRaises(ConflictError):
                self.accounts.register(**dict(ALICE, user_id="alice2"))
        assert self.user_count() == 1

    def test_store_failure_is_internal_error(self):
        with patch(
            "flickhub.auth.service.insert_user",
            side_effect=sqlite3.OperationalError("disk I/O error"),
        ):
            with self.assertRaises(InternalError) as ctx:
                self.accounts.register(**ALICE)
        assert ctx.exception.message == "Server error."
        assert self.user_count() == 0


class TestLogin(AccountServiceTestCase):
    def setUp(self):
        super().setUp()
        self.accounts.register(**ALICE)

    def test_login_by_user_id(self):
        assert self.accounts.login(username="alice1", password="longenough") == {
            "userId": "alice1",
            "name": "Alice",
        }

    def test_login_by_email(self):
        result = self.accounts.login(username="a@x.com", password="longenough")
        assert result["userId"] == "alice1"
        assert result["name"] == "Alice"

    def test_lookup_is_case_sensitive(self):
        with self.assertRaises(AuthError):
            self.accounts.login(username="ALICE1", password="longenough")

    def test_unknown_user_spends_a_password_verify(self):
        with patch.object(self.accounts.password_context, "dummy_verify") as dummy:
            with self.assertRaises(AuthError):
                self.accounts.login(username="nouser", password="wrong")
        dummy.assert_called_once_with()

    def test_known_user_skips_dummy_verify(self):
        with patch.object(self.accounts.password_context, "dummy_verify") as dummy:
            with self.assertRaises(AuthError):
                self.accounts.login(username="alice1", password="wrong")
        dummy.assert_not_called()

    def test_wrong_password_and_unknown_user_are_indistinguishable(self):
        with self.assertRaises(AuthError) as wrong_password:
            self.accounts.login(username="alice1", password="wrong")
        with self.assertRaises(AuthError) as unknown_user:
            self.accounts.login(username="nouser", password="wrong")

        assert wrong_password.exception.message == unknown_user.exception.message
        assert wrong_password.exception.message == "Invalid credentials."

    def test_missing_fields(self):
        for username, password in (("", "longenough"), ("alice1", ""), (None, None)):
            with self.subTest(username=username, password=password):
                with self.assertRaises(ValidationError) as ctx:
                    self.accounts.login(username=username, password=password)
                assert ctx.exception.message == "All fields required."

    def test_store_failure_is_internal_error(self):
        with patch(
            "flickhub.auth.service.get_user_by_login",
            side_effect=sqlite3.OperationalError("database is locked"),
        ):
            with self.assertRaises(InternalError):
                self.accounts.login(username="alice1", password="longenough")


if __name__ == "__main__":
    unittest.main()
