"""搜索状态：关键词、标签、排序方式，并与地址栏的 q 参数保持同步。"""
from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Union

from ..navigation import Navigator


class SortOrder(Enum):
    COMPREHENSIVE = "comprehensive"
    LATEST = "latest"
    HOTTEST = "hottest"

    @classmethod
    def parse(cls, value: Union["SortOrder", str, None], default: Optional["SortOrder"] = None) -> "SortOrder":
        """把字符串转换成 SortOrder；不认识的值在没有默认值时抛出 ValueError。"""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            if default is not None:
                return default
            raise


class SearchStore:
    """给新手的解释：
    - keyword 与地址栏里的 ?q=xxx 必须保持一致，刷新页面或分享链接都能还原搜索。
    - update_keyword_and_url() 是“用户按下搜索”时调用的：空白输入什么也不做。
    """

    def __init__(self, navigator: Navigator):
        self.navigator = navigator
        self.keyword = ""
        self.tag = ""
        self.sort_order = SortOrder.COMPREHENSIVE

    def set_keyword(self, keyword: str) -> None:
        self.keyword = keyword

    def set_tag(self, tag: str) -> None:
        self.tag = tag

    def set_sort_order(self, order: Union[SortOrder, str]) -> None:
        self.sort_order = SortOrder.parse(order)

    def update_keyword_and_url(self, keyword: str) -> bool:
        """更新关键词并把它写进地址栏（不刷新页面）。返回是否真的更新了。"""
        trimmed = (keyword or "").strip()
        if not trimmed:
            return False
        self.keyword = trimmed
        self.navigator.set_query_param("q", trimmed)
        return True

    def sync_from_url(self) -> None:
        """从当前地址读取 q / tag / sort，用于页面首次加载。"""
        params = self.navigator.query_params
        self.keyword = (params.get("q") or "").strip()
        self.tag = params.get("tag", "")
        self.sort_order = SortOrder.parse(params.get("sort"), default=SortOrder.COMPREHENSIVE)

    def as_query(self) -> Dict[str, str]:
        query = {"q": self.keyword, "sort": self.sort_order.value}
        if self.tag:
            query["tag"] = self.tag
        return query
