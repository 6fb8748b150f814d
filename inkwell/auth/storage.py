"""客户端持久化存储（相当于浏览器里的 localStorage / sessionStorage）。

给新手的解释：
- MemoryStorage 只存在内存里，进程结束就没了，适合测试。
- FileStorage 把数据写进一个 JSON 文件，重启后还能读回来，适合“记住登录状态”。
- TokenManager 在存储之上封装了令牌与用户信息的读写，其他模块不需要关心键名。
"""
from __future__ import annotations

import json
import logging
import os
from typing import Dict, Optional

from .models import UserInfo

logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"
USER_KEY = "user"
REDIRECT_AFTER_LOGIN_KEY = "redirect_after_login"


class ClientStorage:
    """键值存储的公共接口，值统一是字符串。"""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(ClientStorage):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class FileStorage(ClientStorage):
    """把键值对保存到 JSON 文件中；每次写入都会立即落盘。"""

    def __init__(self, path: str):
        self.path = path
        self._data: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            # 文件损坏时当作空存储，下一次写入会覆盖它
            logger.warning(f"读取存储文件失败 {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _flush(self) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, ensure_ascii=False)
        os.replace(tmp_path, self.path)

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self._flush()


class TokenManager:
    """管理访问令牌、刷新令牌与本地缓存的用户信息。"""

    def __init__(self, storage: ClientStorage):
        self.storage = storage

    def get_access_token(self) -> Optional[str]:
        return self.storage.get(ACCESS_TOKEN_KEY)

    def set_access_token(self, token: str) -> None:
        self.storage.set(ACCESS_TOKEN_KEY, token)

    def get_refresh_token(self) -> Optional[str]:
        return self.storage.get(REFRESH_TOKEN_KEY)

    def set_refresh_token(self, token: str) -> None:
        self.storage.set(REFRESH_TOKEN_KEY, token)

    def has_valid_token(self) -> bool:
        token = self.get_access_token()
        return token is not None and token.strip() != ""

    def save_user(self, user: UserInfo) -> None:
        self.storage.set(USER_KEY, json.dumps(user.to_dict(), ensure_ascii=False))

    def load_user(self) -> Optional[UserInfo]:
        """读取缓存的用户信息；内容无法解析时返回 None。"""
        raw = self.storage.get(USER_KEY)
        if not raw:
            return None
        try:
            return UserInfo.from_dict(json.loads(raw))
        except (ValueError, TypeError) as e:
            logger.warning(f"本地用户信息解析失败: {e}")
            return None

    def clear_all_tokens(self) -> None:
        self.storage.remove(ACCESS_TOKEN_KEY)
        self.storage.remove(REFRESH_TOKEN_KEY)
        self.storage.remove(USER_KEY)
