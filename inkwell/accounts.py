"""服务端的账号目录（内存“数据库”）。

给新手的解释：
- 账号保存在字典里，服务重启就会恢复成预置账号，只适合演示与测试。
- 密码只保存哈希值（werkzeug.security），不保存明文。
- 与早期的演示代码不同，这里重复注册会被拒绝，不会覆盖已有账号的密码。
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, Optional

from flask import current_app
from werkzeug.security import check_password_hash, generate_password_hash

from .auth.errors import AuthError
from .auth.models import Role, UserInfo

EXTENSION_KEY = "inkwell.accounts"


@dataclass
class Account:
    user: UserInfo
    password_hash: str


class AccountDirectory:
    def __init__(self):
        self._by_name: Dict[str, Account] = {}
        self._by_id: Dict[int, Account] = {}
        self._next_id = 1
        # Flask 开发服务器默认多线程处理请求
        self._lock = threading.Lock()

    def register(self, username: str, password: str, role: Role = Role.USER,
                 email: Optional[str] = None, phone: Optional[str] = None) -> UserInfo:
        username = (username or "").strip()
        if not username or not password:
            raise AuthError.rejected("请填写用户名与密码")
        with self._lock:
            if username in self._by_name:
                raise AuthError.rejected("用户名已存在")
            user = UserInfo(user_id=self._next_id, username=username, role=role, email=email, phone=phone)
            account = Account(user=user, password_hash=generate_password_hash(password))
            self._by_name[username] = account
            self._by_id[user.user_id] = account
            self._next_id += 1
        return user

    def authenticate(self, username: str, password: str) -> Optional[UserInfo]:
        """校验用户名与密码，成功返回用户信息，失败返回 None。"""
        account = self._by_name.get((username or "").strip())
        if account is None or not check_password_hash(account.password_hash, password or ""):
            return None
        return account.user

    def exists(self, username: str) -> bool:
        return (username or "").strip() in self._by_name

    def get(self, user_id: int) -> Optional[UserInfo]:
        account = self._by_id.get(user_id)
        return account.user if account else None

    @classmethod
    def seeded(cls, cfg) -> "AccountDirectory":
        """按配置创建带预置账号（一个管理员、一个普通读者）的目录。"""
        directory = cls()
        directory.register(cfg["SEED_ADMIN_USERNAME"], cfg["SEED_ADMIN_PASSWORD"], role=Role.ADMIN)
        directory.register(cfg["SEED_USER_USERNAME"], cfg["SEED_USER_PASSWORD"])
        return directory


def get_accounts() -> AccountDirectory:
    return current_app.extensions[EXTENSION_KEY]
