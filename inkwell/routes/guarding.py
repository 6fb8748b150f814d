"""服务端的鉴权工具：从 Cookie / 请求头恢复身份，并把路由守卫用在 Flask 视图上。"""
from __future__ import annotations

from functools import wraps
from typing import Optional, Tuple

from flask import current_app, g, jsonify, make_response, redirect, request

from ..accounts import get_accounts
from ..auth.errors import DenialReason
from ..auth.guard import GuardDirective, decide
from ..auth.models import Session, UserInfo
from ..navigation import safe_next_url
from ..utils.jwt import JWTError, JWTManager


def get_jwt_manager() -> JWTManager:
    """从 Flask 配置中读取参数，创建一个 JWT 管理器实例。"""
    return JWTManager.from_config(current_app.config)


def user_from_token(token: Optional[str], token_type: str = "access") -> Optional[UserInfo]:
    """校验令牌并查出对应的用户；任何问题都返回 None（视为未登录）。

    角色以账号目录里的最新记录为准，而不是令牌里签发时的角色。
    """
    if not token:
        return None
    try:
        data = get_jwt_manager().decode_token(token, token_type=token_type)
    except JWTError as e:
        current_app.logger.debug(f"令牌无效: {e}")
        return None
    uid = data.get("uid")
    if not isinstance(uid, int):
        return None
    return get_accounts().get(uid)


def current_session() -> Tuple[Session, Optional[UserInfo]]:
    """根据浏览器 Cookie 构造本次请求的会话快照。

    先看 access_token；它过期或缺失时，再用 refresh_token（类型必须是 refresh）恢复身份。
    服务端每次请求都能同步得到结果，所以会话永远是“已初始化”的。
    """
    cookies = request.cookies
    user = user_from_token(cookies.get(current_app.config["ACCESS_COOKIE_NAME"]))
    if user is None:
        user = user_from_token(cookies.get(current_app.config["REFRESH_COOKIE_NAME"]), token_type="refresh")
    if user is None:
        return Session.logged_out(), None
    return Session.for_user(user), user


def guarded(directive: GuardDirective):
    """视图装饰器：按守卫配置检查当前会话。

    给新手的解释：
    - 通过时，把 g.user / g.session 设置好再执行视图函数。
    - 没登录时，跳转到 directive.redirect_path，并用 Cookie 记住原本要访问的地址，
      登录成功后会自动跳回来。
    - 角色不够时，只跳转，不记地址。
    """

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            session, user = current_session()
            decision = decide(session, directive)
            if decision.allowed:
                g.session = session
                g.user = user
                return fn(*args, **kwargs)

            current_app.logger.info(
                f"拒绝访问 {request.path}（{decision.reason.value}），跳转到 {decision.redirect_path}"
            )
            resp = make_response(redirect(decision.redirect_path))
            if decision.reason is DenialReason.UNAUTHENTICATED:
                target = safe_next_url(request.full_path.rstrip("?"))
                if target:
                    resp.set_cookie(
                        current_app.config["REDIRECT_COOKIE_NAME"],
                        target,
                        httponly=True,
                        samesite="Lax",
                        secure=current_app.config["COOKIE_SECURE"],
                        path="/",
                    )
            return resp

        return wrapper

    return decorator


def parse_authorization_header() -> Tuple[Optional[str], Optional[str]]:
    """解析请求头里的 Authorization 字段，返回 (认证方案, 令牌)。

    例如 "Authorization: Bearer <令牌>" 会得到 ("Bearer", "<令牌>")。
    """
    auth = request.headers.get("Authorization", "")
    if not auth:
        return None, None
    try:
        scheme, token = auth.split(" ", 1)
        return scheme, token
    except ValueError:
        return None, None


def token_required(token_type: str = "access"):
    """接口装饰器：要求请求头里带上指定类型的 JWT，验证通过后身份放在 g.user。"""

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            scheme, token = parse_authorization_header()
            if scheme != "Bearer" or not token:
                return jsonify({"code": 401, "msg": "Authorization header missing or invalid", "data": {}}), 401
            user = user_from_token(token, token_type=token_type)
            if user is None:
                return jsonify({"code": 401, "msg": "Invalid or expired token", "data": {}}), 401
            g.user = user
            return fn(*args, **kwargs)

        return wrapper

    return decorator
