"""路由协作者：记录当前地址、跳转历史，以及读写查询参数。

给新手的解释：
- 浏览器里有“地址栏 + 前进后退历史”。Navigator 就是它在 Python 里的替身。
- push() 相当于 history.pushState：地址变了，但不会重新加载整个应用。
- 路由守卫用它跳转到 /400、/403；搜索状态用它同步地址栏里的 q 参数。
"""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse


def safe_next_url(next_url: Optional[str]) -> Optional[str]:
    """仅允许“站内”跳转，避免开放重定向到外部网站。

    给新手的解释：
    - 登录后要跳回的地址如果不检查，攻击者可以把它改成恶意网站。
    - 这里只允许以 / 开头的相对路径（例如 /accountCenter），不允许带协议或域名，
      也不允许 //evil.com 这种“协议相对”写法；浏览器会把 /\evil.com 当成 //evil.com，同样拒绝。
    """
    if not next_url:
        return None
    try:
        parsed = urlparse(next_url)
    except ValueError:
        return None
    if parsed.scheme or parsed.netloc:
        return None
    if not next_url.startswith("/") or next_url[1:2] in ("/", "\\"):
        return None
    return next_url


class Navigator:
    def __init__(self, start_url: str = "/"):
        self.history: List[str] = [start_url]

    @property
    def current_url(self) -> str:
        return self.history[-1]

    @property
    def path(self) -> str:
        return urlparse(self.current_url).path or "/"

    @property
    def query_pairs(self) -> List[Tuple[str, str]]:
        return parse_qsl(urlparse(self.current_url).query, keep_blank_values=True)

    @property
    def query_params(self) -> Dict[str, str]:
        """查询参数字典；同名参数只取第一个，与浏览器的 searchParams.get 一致。"""
        params: Dict[str, str] = {}
        for key, value in self.query_pairs:
            params.setdefault(key, value)
        return params

    def get_query_param(self, name: str) -> Optional[str]:
        return self.query_params.get(name)

    def push(self, url: str) -> None:
        self.history.append(url)

    def replace(self, url: str) -> None:
        self.history[-1] = url

    def back(self) -> str:
        if len(self.history) > 1:
            self.history.pop()
        return self.current_url

    def set_query_param(self, name: str, value: str) -> str:
        """修改当前地址的一个查询参数，并把新地址压入历史，返回新地址。

        与 URLSearchParams.set 相同：第一个同名参数原地替换，其余同名参数删除，
        没有时追加到末尾；其他参数（包括空值、重复值）和 #锚点 都保持不变。
        """
        pairs: List[Tuple[str, str]] = []
        replaced = False
        for key, current in self.query_pairs:
            if key != name:
                pairs.append((key, current))
            elif not replaced:
                pairs.append((name, value))
                replaced = True
        if not replaced:
            pairs.append((name, value))
        url = urlunparse(urlparse(self.current_url)._replace(query=urlencode(pairs)))
        self.push(url)
        return url
