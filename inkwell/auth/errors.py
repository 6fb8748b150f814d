from enum import Enum


class AuthErrorKind(Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    NETWORK_FAILURE = "network_failure"
    # 服务端拒绝了格式正确的请求，例如用户名已被注册
    REJECTED = "rejected"


class AuthError(Exception):
    """登录、注册、登出等认证操作失败时抛出的异常。

    给新手的解释：
    - kind 告诉调用方“是哪一类失败”：账号密码不对、网络出问题，还是被服务端拒绝。
    - message 是给界面展示的文字说明。
    """

    def __init__(self, kind: AuthErrorKind, message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message or kind.value

    @classmethod
    def invalid_credentials(cls, message: str = "用户名或密码错误") -> "AuthError":
        return cls(AuthErrorKind.INVALID_CREDENTIALS, message)

    @classmethod
    def network_failure(cls, message: str = "网络连接错误") -> "AuthError":
        return cls(AuthErrorKind.NETWORK_FAILURE, message)

    @classmethod
    def rejected(cls, message: str) -> "AuthError":
        return cls(AuthErrorKind.REJECTED, message)


class DenialReason(Enum):
    """路由守卫拒绝访问的原因。这不是异常，只是拒绝结果里附带的说明。"""
    UNAUTHENTICATED = "unauthenticated"
    INSUFFICIENT_ROLE = "insufficient_role"
