"""路由守卫：根据会话状态决定受保护页面能不能显示。

给新手的解释：
- decide() 是一个纯函数：输入“会话快照 + 守卫配置”，输出“等待 / 允许 / 拒绝”。
  它不跳转、不读全局状态，所以非常好测。
- RouteGuard 是一次页面挂载时的“适配器”：调用 decide()，在拒绝时真正去跳转，
  并在会话还没初始化完时订阅变化，等结果出来再判断。
- 拒绝不是异常：它只是一个最终状态，副作用是跳转。
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, TypeVar

from ..navigation import Navigator, safe_next_url
from .errors import DenialReason
from .models import Role, Session
from .session import SessionStore
from .storage import REDIRECT_AFTER_LOGIN_KEY, ClientStorage, MemoryStorage

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GuardState(Enum):
    PENDING = "pending"
    ALLOWED = "allowed"
    DENIED = "denied"


@dataclass(frozen=True)
class GuardDirective:
    """单个受保护路由的配置：需要什么角色、被拒绝时跳到哪里。"""
    required_role: Role = Role.USER
    redirect_path: str = "/"


LOGIN_REQUIRED = GuardDirective(Role.USER, "/400")
ADMIN_REQUIRED = GuardDirective(Role.ADMIN, "/403")


@dataclass(frozen=True)
class GuardDecision:
    state: GuardState
    redirect_path: Optional[str] = None
    reason: Optional[DenialReason] = None

    @property
    def allowed(self) -> bool:
        return self.state is GuardState.ALLOWED

    @property
    def resolved(self) -> bool:
        return self.state is not GuardState.PENDING


def decide(session: Session, directive: GuardDirective) -> GuardDecision:
    if session.is_initializing:
        return GuardDecision(GuardState.PENDING)
    if not session.is_logged_in:
        return GuardDecision(GuardState.DENIED, directive.redirect_path, DenialReason.UNAUTHENTICATED)
    if not session.role.satisfies(directive.required_role):
        return GuardDecision(GuardState.DENIED, directive.redirect_path, DenialReason.INSUFFICIENT_ROLE)
    return GuardDecision(GuardState.ALLOWED)


class RedirectMemory:
    """记住“被拦下时原本想去的地址”，登录成功后用来跳回去。"""

    def __init__(self, storage: Optional[ClientStorage] = None):
        self.storage = storage or MemoryStorage()

    def remember(self, url: str) -> None:
        target = safe_next_url(url)
        if target:
            self.storage.set(REDIRECT_AFTER_LOGIN_KEY, target)

    def peek(self) -> Optional[str]:
        return self.storage.get(REDIRECT_AFTER_LOGIN_KEY)

    def pop(self) -> Optional[str]:
        target = self.peek()
        self.storage.remove(REDIRECT_AFTER_LOGIN_KEY)
        return target


class RouteGuard:
    """一次页面挂载对应一个 RouteGuard。

    - mount()：立即判断一次；如果还在 PENDING，就订阅会话变化，等初始化结束再判断。
    - 第一次得到 ALLOWED / DENIED 后结果就固定下来，不会再变。
    - 拒绝时跳转到配置的地址；如果原因是“没登录”，顺便记住原本要访问的地址。
    """

    def __init__(self, store: SessionStore, directive: GuardDirective, navigator: Navigator,
                 redirect_memory: RedirectMemory, record_origin: bool = True):
        self.store = store
        self.directive = directive
        self.navigator = navigator
        self.redirect_memory = redirect_memory
        self.record_origin = record_origin
        self._decision = GuardDecision(GuardState.PENDING)
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def decision(self) -> GuardDecision:
        return self._decision

    @property
    def state(self) -> GuardState:
        return self._decision.state

    def mount(self) -> GuardDecision:
        self.evaluate()
        if not self._decision.resolved and self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(lambda _session: self.evaluate())
        return self._decision

    def unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def evaluate(self) -> GuardDecision:
        if self._decision.resolved:
            return self._decision
        origin = self.navigator.current_url
        decision = decide(self.store.session, self.directive)
        if not decision.resolved:
            return self._decision
        self._decision = decision
        self.unmount()
        if decision.state is GuardState.DENIED:
            logger.info(f"拒绝访问 {origin}（{decision.reason.value}），跳转到 {decision.redirect_path}")
            if self.record_origin and decision.reason is DenialReason.UNAUTHENTICATED:
                self.redirect_memory.remember(origin)
            self.navigator.push(decision.redirect_path)
        return decision

    def render(self, children: Callable[[], T]) -> Optional[T]:
        """只有 ALLOWED 时才“渲染”子内容；PENDING 与 DENIED 都返回 None。"""
        if self._decision.allowed:
            return children()
        return None
