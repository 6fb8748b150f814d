"""会话状态仓库（Session Store）。

给新手的解释：
- 整个客户端只有这里可以修改“当前是谁登录、是什么角色”。
- 其他模块通过 store.session 读取只读快照，或者用 subscribe() 订阅变化。
- 三个会修改会话的操作都是异步的：initialize_auth / login / logout，
  调用方需要 await 之后再读取新的状态。
"""
from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import Callable, List, Optional

from .api import AuthApi
from .errors import AuthError
from .models import Credentials, RegisterData, RegisterResult, Session, UserInfo
from .storage import TokenManager

logger = logging.getLogger(__name__)

Listener = Callable[[Session], None]


class SessionStore:
    def __init__(self, api: AuthApi, tokens: TokenManager):
        self.api = api
        self.tokens = tokens
        self._session = Session()
        self._user: Optional[UserInfo] = None
        self._listeners: List[Listener] = []
        self._init_task: Optional[asyncio.Future] = None
        # 每次初始化、登录、登出都会递增；初始化结果返回时若编号已过期则直接丢弃
        self._generation = 0

    # ---------- 只读视图 ----------
    @property
    def session(self) -> Session:
        return self._session

    @property
    def user(self) -> Optional[UserInfo]:
        return self._user

    @property
    def is_logged_in(self) -> bool:
        return self._session.is_logged_in

    @property
    def is_initializing(self) -> bool:
        return self._session.is_initializing

    @property
    def initialization_started(self) -> bool:
        return self._init_task is not None

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """订阅会话变化，返回取消订阅的函数。"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, session: Session, user: Optional[UserInfo]) -> None:
        self._session = session
        self._user = user
        for listener in list(self._listeners):
            listener(session)

    def _set_logged_out(self) -> None:
        self._set(Session.logged_out(), None)

    # ---------- 初始化 ----------
    async def initialize_auth(self) -> None:
        """初始化认证状态，整个生命周期只会真正请求一次。

        - 第一次调用会启动后台任务去查询当前用户。
        - 之后（包括并发）的调用只是等待同一个任务完成，不会再发请求。
        - 任何失败都会被记录并吞掉，结果是“未登录”，is_initializing 变为 False。
        """
        if self._init_task is None:
            self._generation += 1
            self._init_task = asyncio.ensure_future(self._initialize(self._generation))
        # shield：某个等待者被取消时，不影响其他人共用的那次请求
        await asyncio.shield(self._init_task)

    async def _initialize(self, generation: int) -> None:
        if not self.tokens.has_valid_token():
            logger.debug("没有本地令牌，设置为未登录状态")
            self._set_logged_out()
            return
        try:
            user = await self.api.get_current_user()
        except Exception as e:
            if generation != self._generation:
                return
            logger.warning(f"初始化认证失败: {e}")
            self._set_logged_out()
            return
        if generation != self._generation:
            # 等待期间用户已经登录或登出，这个结果已经过期
            logger.debug("丢弃过期的初始化结果")
            return
        if user is None:
            logger.warning("登录已过期，请重新登录")
            self.tokens.clear_all_tokens()
            self._set_logged_out()
            return
        self._set(Session.for_user(user), user)

    # ---------- 登录 / 登出 ----------
    async def login(self, credentials: Credentials) -> UserInfo:
        """登录：成功后保存令牌并替换会话；失败抛出 AuthError，会话保持不变。"""
        result = await self.api.login(credentials)
        self._generation += 1
        self.tokens.set_access_token(result.token)
        if result.refresh_token:
            self.tokens.set_refresh_token(result.refresh_token)
        self.tokens.save_user(result.user)
        logger.info(f"用户 {result.user.username} 登录成功")
        self._set(Session.for_user(result.user), result.user)
        return result.user

    async def logout(self) -> bool:
        """登出：本地会话与令牌一定会被清除。

        返回值表示远端登出是否成功；远端失败只记录日志，不影响本地结果。
        """
        self._generation += 1
        self._set_logged_out()
        # 远端登出需要带上旧令牌，所以令牌在请求结束后再清理
        try:
            if self.tokens.has_valid_token():
                await self._remote_logout()
            return True
        except AuthError as e:
            logger.warning(f"远端登出失败，已完成本地登出: {e}")
            return False
        finally:
            self.tokens.clear_all_tokens()

    async def _remote_logout(self) -> None:
        ok = await self.api.logout()
        if not ok:
            raise AuthError.rejected("登出失败")

    async def register(self, data: RegisterData) -> RegisterResult:
        """注册只是转发给认证接口，不会修改会话。"""
        return await self.api.register(data)

    def set_user_info(self, user: UserInfo) -> None:
        """更新当前用户的资料（例如修改头像后）；未登录时忽略。"""
        if not self._session.is_logged_in:
            return
        self.tokens.save_user(user)
        session = dataclasses.replace(
            self._session,
            user_id=user.user_id,
            username=user.username,
            role=user.role,
            avatar_url=user.avatar_url,
        )
        self._set(session, user)
