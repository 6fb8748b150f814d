from __future__ import annotations

import time
from typing import Any, Dict, Optional

import jwt

# 令牌里的身份字段：uid / uname / role / version
TOKEN_VERSION = 1


class JWTError(Exception):
    """JWT 相关错误的通用异常。

    给新手的解释：
    - 当令牌过期、被篡改或格式不对时，我们会抛出这个错误，方便上层统一处理。
    """
    pass


class JWTManager:
    """负责“生成令牌（签发）”与“验证令牌（解码/校验）”的工具类。

    给新手的解释：
    - 你可以把 JWT 理解成一张“加密的身份证”，里面写着“你是谁、是什么角色、什么时候过期”。
    - 服务端用一个秘密钥匙（secret）来“签名”这张身份证，别人不知道这个钥匙就无法伪造。
    - 身份信息直接写在载荷顶层（uid、uname、role），sub 字段只放字符串形式的用户 ID，
      因为新版 PyJWT 要求 sub 必须是字符串。

    使用方式示例：
        manager = JWTManager(secret="xxx")
        token = manager.encode_access_token({"uid": 1, "uname": "alice", "role": 0})
        claims = manager.decode_token(token)
    """

    def __init__(self, secret: str, algorithm: str = "HS256",
                 access_expires: int = 3600, refresh_expires: int = 86400 * 7,
                 leeway: int = 5):
        self.secret = secret
        self.algorithm = algorithm
        self.access_expires = access_expires
        self.refresh_expires = refresh_expires
        # 允许少量时间漂移，避免 iat/nbf/exp 的秒级对齐问题导致无法解码
        self.leeway = leeway

    @classmethod
    def from_config(cls, cfg) -> "JWTManager":
        """从配置映射（Flask 的 app.config 或普通 dict）创建实例。"""
        return cls(
            secret=cfg.get("JWT_SECRET_KEY"),
            algorithm=cfg.get("JWT_ALGORITHM", "HS256"),
            access_expires=int(cfg.get("JWT_ACCESS_TOKEN_EXPIRES", 3600)),
            refresh_expires=int(cfg.get("JWT_REFRESH_TOKEN_EXPIRES", 86400 * 7)),
            leeway=int(cfg.get("JWT_LEEWAY", 5)),
        )

    def _encode(self, identity: Dict[str, Any], expire_in: int, token_type: str) -> str:
        """内部方法：根据身份信息生成指定类型（access / refresh）的 JWT。"""
        now = int(time.time())
        data = {
            **identity,
            "sub": str(identity.get("uid", "")),
            "version": TOKEN_VERSION,
            "iat": now,
            "nbf": now,
            "exp": now + expire_in,
            "type": token_type,
        }
        return jwt.encode(data, self.secret, algorithm=self.algorithm)

    def encode_access_token(self, identity: Dict[str, Any]) -> str:
        """生成“访问令牌”（短期用），用于访问受保护页面与接口。"""
        return self._encode(identity, self.access_expires, "access")

    def encode_refresh_token(self, identity: Dict[str, Any]) -> str:
        """生成“刷新令牌”（长期用），用于在 access 过期后换新令牌。"""
        return self._encode(identity, self.refresh_expires, "refresh")

    def decode_token(self, token: str, token_type: Optional[str] = None) -> Dict[str, Any]:
        """验证并解码令牌：检查签名与过期时间，返回令牌里写的内容。

        如果给了 token_type，还会检查令牌类型是否一致（access 或 refresh）。
        """
        try:
            data = jwt.decode(token, self.secret, algorithms=[self.algorithm], leeway=self.leeway)
        except jwt.ExpiredSignatureError as e:
            # 过期：需要重新登录或使用 refresh_token 换新
            raise JWTError(f"ExpiredSignatureError: {e}") from e
        except jwt.InvalidSignatureError as e:
            # 签名不匹配：密钥或算法不一致
            raise JWTError(f"InvalidSignatureError: {e}") from e
        except jwt.ImmatureSignatureError as e:
            raise JWTError(f"ImmatureSignatureError: {e}") from e
        except jwt.DecodeError as e:
            # 解析失败：令牌结构或编码有问题
            raise JWTError(f"DecodeError: {e}") from e
        except jwt.InvalidTokenError as e:
            # 兜底：其他 PyJWT 抛出的无效令牌错误
            raise JWTError(f"InvalidTokenError: {e}") from e
        if token_type and data.get("type") != token_type:
            raise JWTError("Token type mismatch")
        return data


def extract_claims(token: str) -> Optional[Dict[str, Any]]:
    """不验证签名，只解析令牌里的身份字段。

    客户端拿不到服务端密钥，只能“看一眼”令牌里写了什么（例如 uid），
    真正的校验仍由服务端完成。解析失败时返回 None。
    """
    if not token:
        return None
    try:
        return jwt.decode(
            token,
            options={
                "verify_signature": False,
                "verify_exp": False,
                "verify_nbf": False,
                "verify_iat": False,
            },
        )
    except jwt.InvalidTokenError:
        return None
