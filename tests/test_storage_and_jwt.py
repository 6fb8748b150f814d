"""
Tests for inkwell/auth/storage.py and inkwell/utils/jwt.py.
"""

import json
import os
import sys
import tempfile
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from inkwell.auth.models import Role, UserInfo
from inkwell.auth.storage import FileStorage, MemoryStorage, TokenManager
from inkwell.utils.jwt import JWTError, JWTManager, extract_claims


class TestFileStorage(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, "nested", "storage.json")

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_survives_restart(self):
        tokens = TokenManager(FileStorage(self.path))
        tokens.set_access_token("abc")
        tokens.save_user(UserInfo(user_id=3, username="zoe", role=Role.ADMIN))

        reopened = TokenManager(FileStorage(self.path))
        self.assertEqual(reopened.get_access_token(), "abc")
        self.assertEqual(reopened.load_user().role, Role.ADMIN)

        reopened.clear_all_tokens()
        self.assertFalse(TokenManager(FileStorage(self.path)).has_valid_token())

    def test_corrupt_file_reads_as_empty(self):
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("{not json")
        self.assertIsNone(FileStorage(self.path).get("access_token"))


class TestTokenManager(unittest.TestCase):

    def test_blank_token_is_not_valid(self):
        tokens = TokenManager(MemoryStorage({"access_token": "   "}))
        self.assertFalse(tokens.has_valid_token())

    def test_unreadable_user_record(self):
        storage = MemoryStorage({"user": json.dumps({"username": "no-id"})})
        self.assertIsNone(TokenManager(storage).load_user())
        storage.set("user", "[]")
        self.assertIsNone(TokenManager(storage).load_user())


class TestJWTManager(unittest.TestCase):

    def setUp(self):
        self.manager = JWTManager(secret="s", access_expires=60)
        self.identity = {"uid": 4, "uname": "amy", "role": 0}

    def test_decode_checks_type(self):
        access = self.manager.encode_access_token(self.identity)
        data = self.manager.decode_token(access, token_type="access")
        self.assertEqual(data["uid"], 4)
        self.assertEqual(data["sub"], "4")
        with self.assertRaises(JWTError):
            self.manager.decode_token(access, token_type="refresh")

    def test_expired_token(self):
        expired = JWTManager(secret="s", access_expires=-60, leeway=0).encode_access_token(self.identity)
        with self.assertRaises(JWTError):
            self.manager.decode_token(expired)

    def test_wrong_secret(self):
        token = JWTManager(secret="other").encode_access_token(self.identity)
        with self.assertRaises(JWTError):
            self.manager.decode_token(token)

    def test_extract_claims_without_secret(self):
        token = JWTManager(secret="other").encode_access_token(self.identity)
        self.assertEqual(extract_claims(token)["uname"], "amy")
        self.assertIsNone(extract_claims("not-a-token"))
        self.assertIsNone(extract_claims(""))


if __name__ == "__main__":
    unittest.main()
