"""认证相关的客户端核心：会话仓库、路由守卫、认证上下文。"""

from .api import AuthApi, HttpAuthApi, MockAuthApi
from .context import AuthContext, ModalKind
from .errors import AuthError, AuthErrorKind, DenialReason
from .guard import (
    ADMIN_REQUIRED,
    LOGIN_REQUIRED,
    GuardDecision,
    GuardDirective,
    GuardState,
    RedirectMemory,
    RouteGuard,
    decide,
)
from .models import Credentials, LoginResult, RegisterData, RegisterResult, Role, Session, UserInfo
from .session import SessionStore
from .storage import ClientStorage, FileStorage, MemoryStorage, TokenManager
