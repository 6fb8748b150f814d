"""认证相关的数据模型：角色、用户信息、会话快照以及请求参数。"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, Optional


class Role(IntEnum):
    """用户角色：0 = 普通用户，1 = 管理员。"""
    USER = 0
    ADMIN = 1

    def satisfies(self, required: "Role") -> bool:
        """判断当前角色是否满足要求：普通要求任何登录角色都满足，管理员要求只有管理员满足。"""
        return self >= required


@dataclass(frozen=True)
class UserInfo:
    user_id: int
    username: str
    role: Role = Role.USER
    avatar_url: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.user_id,
            "username": self.username,
            "role": int(self.role),
            "avatar_url": self.avatar_url,
            "email": self.email,
            "phone": self.phone,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserInfo":
        """从接口返回或本地存储的字典恢复用户信息；缺少 id/username 时抛出 ValueError。"""
        if "id" not in data or not data.get("username"):
            raise ValueError("user record requires id and username")
        return cls(
            user_id=int(data["id"]),
            username=str(data["username"]),
            role=Role(int(data.get("role") or 0)),
            avatar_url=data.get("avatar_url") or "",
            email=data.get("email"),
            phone=data.get("phone"),
        )


@dataclass(frozen=True)
class Session:
    """当前访客的会话快照（只读）。

    给新手的解释：
    - 会话由 SessionStore 独占维护，每次变化都会生成一个新的快照对象。
    - 其他模块拿到的都是不可修改的快照，所以不用担心被别人“偷偷改掉”。
    - 刚启动时 is_initializing=True，表示“还不知道你有没有登录”。
    """
    user_id: Optional[int] = None
    username: Optional[str] = None
    role: Role = Role.USER
    avatar_url: str = ""
    is_logged_in: bool = False
    is_initializing: bool = True

    @classmethod
    def for_user(cls, user: UserInfo) -> "Session":
        return cls(
            user_id=user.user_id,
            username=user.username,
            role=user.role,
            avatar_url=user.avatar_url,
            is_logged_in=True,
            is_initializing=False,
        )

    @classmethod
    def logged_out(cls) -> "Session":
        return cls(is_initializing=False)


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)
    email: Optional[str] = None
    phone: Optional[str] = None


@dataclass(frozen=True)
class RegisterData:
    username: str
    password: str = field(repr=False)
    email: Optional[str] = None
    phone: Optional[str] = None


@dataclass(frozen=True)
class LoginResult:
    user: UserInfo
    token: str
    refresh_token: Optional[str] = None


@dataclass(frozen=True)
class RegisterResult:
    success: bool
    message: str = ""
