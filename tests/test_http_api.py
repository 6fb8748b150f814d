"""
Tests for inkwell/auth/api.py HttpAuthApi: request shapes, token refresh and
error mapping, driven through httpx.MockTransport.
"""

import sys
import unittest
from pathlib import Path

import httpx

sys.path.insert(0, str(Path(__file__).parent.parent))

from inkwell.auth.api import HttpAuthApi
from inkwell.auth.errors import AuthError, AuthErrorKind
from inkwell.auth.models import Credentials, RegisterData, Role
from inkwell.auth.storage import MemoryStorage, TokenManager
from inkwell.utils.jwt import JWTManager

MANAGER = JWTManager(secret="test-secret")
IDENTITY = {"uid": 5, "uname": "writer", "role": 1}
USER = {"id": 5, "username": "writer", "role": 1, "avatar_url": "", "email": None, "phone": None}


def envelope(data=None, code=200, msg="ok"):
    return {"code": code, "msg": msg, "data": data or {}}


class HttpApiTestCase(unittest.IsolatedAsyncioTestCase):

    def make(self, handler, storage=None):
        self.requests = []

        def record(request):
            self.requests.append(request)
            return handler(request)

        self.tokens = TokenManager(storage or MemoryStorage())
        return HttpAuthApi("http://backend.test", self.tokens, transport=httpx.MockTransport(record))


class TestLogin(HttpApiTestCase):

    async def test_login_fetches_user_info(self):
        token = MANAGER.encode_access_token(IDENTITY)

        def handler(request):
            if request.url.path == "/api/auth/login":
                return httpx.Response(200, json=envelope({"id": 5, "token": token, "refresh_token": "r"}))
            if request.url.path == "/api/user/info/5":
                self.assertEqual(request.headers["Authorization"], f"Bearer {token}")
                return httpx.Response(200, json=envelope(USER))
            return httpx.Response(404)

        api = self.make(handler)
        result = await api.login(Credentials("writer", "pw"))

        self.assertEqual(result.token, token)
        self.assertEqual(result.refresh_token, "r")
        self.assertEqual(result.user.username, "writer")
        self.assertEqual(result.user.role, Role.ADMIN)
        self.assertEqual([r.url.path for r in self.requests], ["/api/auth/login", "/api/user/info/5"])

    async def test_malformed_user_id_is_rejected(self):
        for bad_id in ("abc", None, [5]):
            with self.subTest(bad_id=bad_id):
                api = self.make(lambda request: httpx.Response(200, json=envelope({"id": bad_id, "token": "t"})))
                with self.assertRaises(AuthError) as ctx:
                    await api.login(Credentials("writer", "pw"))
                self.assertEqual(ctx.exception.kind, AuthErrorKind.REJECTED)
                self.assertEqual([r.url.path for r in self.requests], ["/api/auth/login"])

    async def test_error_mapping(self):
        cases = [
            (httpx.Response(401, json=envelope(code=401, msg="用户名或密码错误")), AuthErrorKind.INVALID_CREDENTIALS),
            (httpx.Response(503, text="unavailable"), AuthErrorKind.NETWORK_FAILURE),
            (httpx.Response(400, json=envelope(code=400, msg="bad")), AuthErrorKind.REJECTED),
            (httpx.Response(200, json=envelope(code=500, msg="odd")), AuthErrorKind.REJECTED),
        ]
        for response, kind in cases:
            with self.subTest(kind=kind, status=response.status_code):
                api = self.make(lambda request, response=response: response)
                with self.assertRaises(AuthError) as ctx:
                    await api.login(Credentials("writer", "pw"))
                self.assertEqual(ctx.exception.kind, kind)

    async def test_connection_error_is_network_failure(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        api = self.make(handler)
        with self.assertRaises(AuthError) as ctx:
            await api.login(Credentials("writer", "pw"))
        self.assertEqual(ctx.exception.kind, AuthErrorKind.NETWORK_FAILURE)


class TestCurrentUser(HttpApiTestCase):

    async def test_without_token_returns_none_without_request(self):
        api = self.make(lambda request: httpx.Response(500))
        self.assertIsNone(await api.get_current_user())
        self.assertEqual(self.requests, [])

    async def test_me_with_access_token(self):
        storage = MemoryStorage({"access_token": MANAGER.encode_access_token(IDENTITY)})
        api = self.make(lambda request: httpx.Response(200, json=envelope(USER)), storage)
        user = await api.get_current_user()
        self.assertEqual(user.user_id, 5)

    async def test_expired_access_token_is_refreshed_once(self):
        old = MANAGER.encode_access_token(IDENTITY)
        new = MANAGER.encode_access_token({**IDENTITY, "uname": "fresh"})
        storage = MemoryStorage({"access_token": old, "refresh_token": "refresh-me"})

        def handler(request):
            auth = request.headers.get("Authorization")
            if request.url.path == "/api/auth/refresh":
                self.assertEqual(auth, "Bearer refresh-me")
                return httpx.Response(200, json=envelope({"token": new}))
            if auth == f"Bearer {new}":
                return httpx.Response(200, json=envelope(USER))
            return httpx.Response(401, json=envelope(code=401, msg="expired"))

        api = self.make(handler, storage)
        user = await api.get_current_user()

        self.assertEqual(user.username, "writer")
        self.assertEqual(self.tokens.get_access_token(), new)
        self.assertEqual([r.url.path for r in self.requests], ["/api/auth/me", "/api/auth/refresh", "/api/auth/me"])

    async def test_unrefreshable_session_is_none(self):
        storage = MemoryStorage({"access_token": MANAGER.encode_access_token(IDENTITY)})
        api = self.make(lambda request: httpx.Response(401, json=envelope(code=401)), storage)
        self.assertIsNone(await api.get_current_user())


class TestRegisterAndLogout(HttpApiTestCase):

    async def test_register_conflict_is_rejected(self):
        api = self.make(lambda request: httpx.Response(409, json=envelope(code=409, msg="用户名已存在")))
        with self.assertRaises(AuthError) as ctx:
            await api.register(RegisterData("writer", "pw"))
        self.assertEqual(ctx.exception.kind, AuthErrorKind.REJECTED)
        self.assertEqual(ctx.exception.message, "用户名已存在")

    async def test_register_success(self):
        api = self.make(lambda request: httpx.Response(200, json=envelope({"id": 9})))
        result = await api.register(RegisterData("writer", "pw"))
        self.assertTrue(result.success)

    async def test_logout_sends_bearer_token(self):
        storage = MemoryStorage({"access_token": "abc"})
        api = self.make(lambda request: httpx.Response(200, json=envelope()), storage)
        self.assertTrue(await api.logout())
        self.assertEqual(self.requests[0].headers["Authorization"], "Bearer abc")


if __name__ == "__main__":
    unittest.main()
