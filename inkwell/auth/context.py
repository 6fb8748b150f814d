"""认证上下文 + 登录/注册弹窗控制器。"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from ..navigation import Navigator
from .errors import AuthError
from .guard import RedirectMemory
from .models import Credentials, RegisterData, UserInfo
from .session import SessionStore

logger = logging.getLogger(__name__)


class ModalKind(Enum):
    NONE = "none"
    LOGIN = "login"
    REGISTER = "register"


class AuthContext:
    """给页眉、导航和各页面使用的认证入口。

    给新手的解释：
    - 页面不直接操作 SessionStore，而是调用这里的方法：打开登录框、提交登录、退出登录……
    - 登录成功后会关闭弹窗；如果之前被路由守卫拦下并记住了目标地址，就跳回那个地址。
    - 登录/注册失败不会抛给页面，而是把提示文字放进 error，返回 False。
    """

    def __init__(self, store: SessionStore, navigator: Navigator, redirect_memory: RedirectMemory):
        self.store = store
        self.navigator = navigator
        self.redirect_memory = redirect_memory
        self.modal = ModalKind.NONE
        self.error: Optional[str] = None
        self.loading = False

    # ---------- 派生状态 ----------
    @property
    def is_logged_in(self) -> bool:
        return self.store.is_logged_in

    @property
    def is_authenticated(self) -> bool:
        session = self.store.session
        return session.is_logged_in and session.user_id is not None

    @property
    def user(self) -> Optional[UserInfo]:
        return self.store.user

    @property
    def modal_visible(self) -> bool:
        return self.modal is not ModalKind.NONE

    # ---------- 弹窗 ----------
    def open_login_modal(self) -> None:
        self.error = None
        self.modal = ModalKind.LOGIN

    def open_register_modal(self) -> None:
        self.error = None
        self.modal = ModalKind.REGISTER

    def close_modal(self) -> None:
        self.modal = ModalKind.NONE

    # ---------- 会话操作 ----------
    async def start(self) -> None:
        """应用启动时调用；重复调用不会重复请求。"""
        await self.store.initialize_auth()

    async def submit_login(self, credentials: Credentials) -> bool:
        self.loading = True
        self.error = None
        try:
            await self.store.login(credentials)
        except AuthError as e:
            logger.info(f"登录失败: {e.message}")
            self.error = e.message
            return False
        finally:
            self.loading = False
        self.close_modal()
        target = self.redirect_memory.pop()
        if target:
            self.navigator.push(target)
        return True

    async def submit_register(self, data: RegisterData) -> bool:
        """注册成功后切换到登录弹窗，提示用户用新账号登录。"""
        self.loading = True
        self.error = None
        try:
            await self.store.register(data)
        except AuthError as e:
            logger.info(f"注册失败: {e.message}")
            self.error = e.message
            return False
        finally:
            self.loading = False
        self.modal = ModalKind.LOGIN
        return True

    async def logout(self) -> bool:
        return await self.store.logout()
