"""客户端组装入口：把会话、路由、搜索等模块按配置连接起来。

给新手的解释：
- 以前这些状态都是“全局单例”，现在统一由 build_client() 创建并互相注入，
  每个测试都可以得到一套互不影响的新实例。
- 使用方式：
    client = build_client()
    await client.auth.start()
    guard = client.guard(ADMIN_REQUIRED)
    guard.mount()
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .auth.api import AuthApi, HttpAuthApi, MockAuthApi
from .auth.context import AuthContext
from .auth.guard import GuardDirective, RedirectMemory, RouteGuard
from .auth.session import SessionStore
from .auth.storage import ClientStorage, FileStorage, MemoryStorage, TokenManager
from .config import ClientConfig
from .navigation import Navigator
from .stores.search import SearchStore
from .stores.ui import UIStore

logger = logging.getLogger(__name__)


@dataclass
class Client:
    navigator: Navigator
    storage: ClientStorage
    tokens: TokenManager
    api: AuthApi
    store: SessionStore
    redirect_memory: RedirectMemory
    auth: AuthContext
    search: SearchStore
    ui: UIStore

    def navigate(self, url: str, directive: Optional[GuardDirective] = None) -> Optional[RouteGuard]:
        """跳转到新地址；如果目标是受保护路由，挂载一个新的守卫并返回它。"""
        self.navigator.push(url)
        if directive is None:
            return None
        guard = self.guard(directive)
        guard.mount()
        return guard

    def guard(self, directive: GuardDirective) -> RouteGuard:
        return RouteGuard(self.store, directive, self.navigator, self.redirect_memory)


def build_client(config: Optional[ClientConfig] = None, api: Optional[AuthApi] = None,
                 storage: Optional[ClientStorage] = None) -> Client:
    cfg = config or ClientConfig()
    if storage is None:
        storage = FileStorage(cfg.STORAGE_PATH) if cfg.STORAGE_PATH else MemoryStorage()
    tokens = TokenManager(storage)
    if api is None:
        if cfg.USE_MOCK_API:
            api = MockAuthApi(tokens, delay=cfg.MOCK_API_DELAY)
        else:
            api = HttpAuthApi(cfg.API_BASE_URL, tokens, timeout=cfg.API_TIMEOUT)
    logger.debug(f"客户端使用认证接口: {type(api).__name__}")

    navigator = Navigator(cfg.START_URL)
    store = SessionStore(api, tokens)
    redirect_memory = RedirectMemory(MemoryStorage())
    search = SearchStore(navigator)
    search.sync_from_url()
    return Client(
        navigator=navigator,
        storage=storage,
        tokens=tokens,
        api=api,
        store=store,
        redirect_memory=redirect_memory,
        auth=AuthContext(store, navigator, redirect_memory),
        search=search,
        ui=UIStore(),
    )
