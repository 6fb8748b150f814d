"""认证接口（外部协作者）。

给新手的解释：
- AuthApi 只规定“有哪些异步方法”，会话逻辑只依赖这个接口，不关心背后是真服务器还是模拟数据。
- MockAuthApi 在进程内模拟后端：带人为延迟、账号保存在字典里，适合本地演示与测试。
- HttpAuthApi 用 httpx 通过 HTTP 调用本项目 Flask 服务提供的 /api 接口。
- 所有失败都以 AuthError 的形式抛出，调用方据此决定给用户展示什么。
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from ..utils.jwt import JWTManager, extract_claims
from .errors import AuthError
from .models import Credentials, LoginResult, RegisterData, RegisterResult, Role, UserInfo
from .storage import TokenManager

logger = logging.getLogger(__name__)


class AuthApi:
    """认证接口的抽象定义。"""

    async def login(self, credentials: Credentials) -> LoginResult:
        raise NotImplementedError

    async def register(self, data: RegisterData) -> RegisterResult:
        raise NotImplementedError

    async def logout(self) -> bool:
        raise NotImplementedError

    async def get_current_user(self) -> Optional[UserInfo]:
        raise NotImplementedError


class MockAuthApi(AuthApi):
    """进程内模拟的认证接口。

    - 账号保存在内存字典里：用户名 => (密码, 用户信息)。
    - 每次调用前 sleep(delay)，模拟网络延迟。
    - get_current_user 直接读取本地存储里的 user 记录（与真实后端无关的兜底路径）。
    """

    def __init__(self, tokens: TokenManager, jwt_manager: Optional[JWTManager] = None,
                 delay: float = 0.0):
        self.tokens = tokens
        self.jwt_manager = jwt_manager or JWTManager(secret="mock-secret")
        self.delay = delay
        self.accounts: Dict[str, Tuple[str, UserInfo]] = {}
        self._next_id = 1

    def add_account(self, username: str, password: str, role: Role = Role.USER,
                    email: Optional[str] = None, phone: Optional[str] = None) -> UserInfo:
        user = UserInfo(user_id=self._next_id, username=username, role=role, email=email, phone=phone)
        self._next_id += 1
        self.accounts[username] = (password, user)
        return user

    async def _simulate_latency(self) -> None:
        if self.delay > 0:
            await asyncio.sleep(self.delay)

    async def login(self, credentials: Credentials) -> LoginResult:
        logger.debug(f"模拟登录请求: {credentials.username}")
        await self._simulate_latency()
        record = self.accounts.get(credentials.username)
        if record is None or record[0] != credentials.password:
            raise AuthError.invalid_credentials()
        user = record[1]
        identity = {"uid": user.user_id, "uname": user.username, "role": int(user.role)}
        return LoginResult(
            user=user,
            token=self.jwt_manager.encode_access_token(identity),
            refresh_token=self.jwt_manager.encode_refresh_token(identity),
        )

    async def register(self, data: RegisterData) -> RegisterResult:
        logger.debug(f"模拟注册请求: {data.username}")
        await self._simulate_latency()
        if not data.username or not data.password:
            raise AuthError.rejected("请填写用户名与密码")
        if data.username in self.accounts:
            raise AuthError.rejected("用户名已存在")
        self.add_account(data.username, data.password, email=data.email, phone=data.phone)
        return RegisterResult(success=True, message="注册成功")

    async def logout(self) -> bool:
        await self._simulate_latency()
        return True

    async def get_current_user(self) -> Optional[UserInfo]:
        await self._simulate_latency()
        return self.tokens.load_user()


class HttpAuthApi(AuthApi):
    """通过 HTTP 调用认证后端。

    后端返回统一的信封格式 {"code": ..., "msg": ..., "data": ...}。
    错误映射：
    - 连接失败、超时、5xx => NETWORK_FAILURE
    - 401 => INVALID_CREDENTIALS
    - 其他 4xx 或 code != 200 => REJECTED
    """

    def __init__(self, base_url: str, tokens: TokenManager, timeout: float = 10.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.tokens = tokens
        self.timeout = timeout
        # 测试时可以注入 httpx.MockTransport
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def _send(self, method: str, path: str, json: Optional[Dict[str, Any]] = None,
                    token: Optional[str] = None) -> httpx.Response:
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            async with self._client() as client:
                logger.debug(f"{method} {path}")
                return await client.request(method, path, json=json, headers=headers)
        except httpx.TimeoutException as e:
            logger.error(f"请求超时 {method} {path}: {e}")
            raise AuthError.network_failure("服务器响应超时") from e
        except httpx.RequestError as e:
            logger.error(f"请求失败 {method} {path}: {e}")
            raise AuthError.network_failure() from e

    @staticmethod
    def _payload(response: httpx.Response) -> Dict[str, Any]:
        """检查状态码并取出信封里的 data；失败时抛出对应的 AuthError。"""
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        msg = body.get("msg") or body.get("error") or f"HTTP {response.status_code}"
        if response.status_code >= 500:
            raise AuthError.network_failure(msg)
        if response.status_code == 401:
            raise AuthError.invalid_credentials(msg)
        if response.status_code >= 400 or body.get("code", 200) != 200:
            raise AuthError.rejected(msg)
        data = body.get("data")
        return data if isinstance(data, dict) else {}

    async def _fetch_user(self, user_id: int, token: Optional[str]) -> UserInfo:
        data = self._payload(await self._send("GET", f"/api/user/info/{user_id}", token=token))
        try:
            return UserInfo.from_dict(data)
        except (ValueError, TypeError) as e:
            raise AuthError.rejected("获取用户信息失败") from e

    async def login(self, credentials: Credentials) -> LoginResult:
        body = {
            "username": credentials.username,
            "password": credentials.password,
            "email": credentials.email,
            "phone": credentials.phone,
        }
        data = self._payload(await self._send("POST", "/api/auth/login", json=body))
        token = data.get("token")
        if not token or "id" not in data:
            raise AuthError.rejected("登录失败")
        try:
            user_id = int(data["id"])
        except (ValueError, TypeError) as e:
            raise AuthError.rejected("登录失败") from e
        user = await self._fetch_user(user_id, token)
        return LoginResult(user=user, token=token, refresh_token=data.get("refresh_token"))

    async def register(self, data: RegisterData) -> RegisterResult:
        body = {
            "username": data.username,
            "password": data.password,
            "email": data.email,
            "phone": data.phone,
        }
        self._payload(await self._send("POST", "/api/auth/register", json=body))
        return RegisterResult(success=True, message="注册成功")

    async def logout(self) -> bool:
        response = await self._send("GET", "/api/user/logout", token=self.tokens.get_access_token())
        self._payload(response)
        return True

    async def _refresh(self) -> Optional[str]:
        """用刷新令牌换新的访问令牌；失败返回 None。"""
        refresh_token = self.tokens.get_refresh_token()
        if not refresh_token:
            return None
        response = await self._send("POST", "/api/auth/refresh", token=refresh_token)
        if response.status_code == 401:
            return None
        token = self._payload(response).get("token")
        if token:
            self.tokens.set_access_token(token)
        return token

    async def get_current_user(self) -> Optional[UserInfo]:
        """用本地的访问令牌查询当前用户。

        令牌过期时会先尝试刷新一次；刷新也失败就返回 None（视为未登录）。
        """
        token = self.tokens.get_access_token()
        if not token or extract_claims(token) is None:
            return None
        response = await self._send("GET", "/api/auth/me", token=token)
        if response.status_code == 401:
            token = await self._refresh()
            if not token:
                return None
            response = await self._send("GET", "/api/auth/me", token=token)
            if response.status_code == 401:
                return None
        data = self._payload(response)
        try:
            return UserInfo.from_dict(data)
        except (ValueError, TypeError) as e:
            raise AuthError.rejected("获取用户信息失败") from e
