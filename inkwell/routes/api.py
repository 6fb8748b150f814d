from flask import Blueprint, current_app, g, jsonify, request

from ..accounts import get_accounts
from ..auth.errors import AuthError
from .guarding import get_jwt_manager, token_required


api_bp = Blueprint("api", __name__)


def _ok(data=None, msg="ok"):
    return jsonify({"code": 200, "msg": msg, "data": data or {}})


def _fail(status: int, msg: str):
    return jsonify({"code": status, "msg": msg, "data": {}}), status


def _identity(user) -> dict:
    return {"uid": user.user_id, "uname": user.username, "role": int(user.role)}


@api_bp.post("/auth/login")
def login():
    """登录接口：校验账号密码，签发 access / refresh 两个 JWT。

    给新手的解释：
    - 成功时返回 {"code": 200, "data": {"id": 用户ID, "token": ..., "refresh_token": ...}}。
    - 客户端拿到 id 后，再调用 /api/user/info/<id> 获取完整的用户资料。
    """
    data = request.get_json(silent=True) or {}
    username = data.get("username")
    password = data.get("password")
    if not username or not password:
        return _fail(400, "username and password required")

    user = get_accounts().authenticate(username, password)
    if user is None:
        current_app.logger.info(f"登录失败: {username}")
        return _fail(401, "用户名或密码错误")

    manager = get_jwt_manager()
    return _ok({
        "id": user.user_id,
        "token": manager.encode_access_token(_identity(user)),
        "refresh_token": manager.encode_refresh_token(_identity(user)),
        "expires_in": manager.access_expires,
    }, msg="登录成功")


@api_bp.post("/auth/register")
def register():
    data = request.get_json(silent=True) or {}
    accounts = get_accounts()
    if accounts.exists(data.get("username", "")):
        return _fail(409, "用户名已存在")
    try:
        user = accounts.register(
            data.get("username", ""),
            data.get("password", ""),
            email=data.get("email"),
            phone=data.get("phone"),
        )
    except AuthError as e:
        return _fail(400, e.message)
    current_app.logger.info(f"新用户注册: {user.username}")
    return _ok({"id": user.user_id}, msg="注册成功")


@api_bp.post("/auth/refresh")
@token_required(token_type="refresh")
def refresh():
    """使用 refresh_token 换发新的 access_token。

    需要在请求头里携带“Bearer <refresh_token>”。
    """
    manager = get_jwt_manager()
    return _ok({"token": manager.encode_access_token(_identity(g.user))})


@api_bp.get("/auth/me")
@token_required()
def me():
    """返回当前登录用户的信息，要求请求头带上 access_token。"""
    return _ok(g.user.to_dict())


@api_bp.get("/user/info/<int:user_id>")
def user_info(user_id: int):
    user = get_accounts().get(user_id)
    if user is None:
        return _fail(404, "用户不存在")
    return _ok(user.to_dict())


@api_bp.get("/user/logout")
def logout():
    """登出接口：令牌本身无状态，这里只记录日志并返回成功。"""
    current_app.logger.debug("收到登出请求")
    return _ok(msg="已登出")


@api_bp.get("/health")
def health():
    """健康检查接口：用于确认服务是否正常运行。"""
    return {"status": "ok"}
