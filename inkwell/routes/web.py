from flask import (
    Blueprint,
    current_app,
    g,
    jsonify,
    make_response,
    redirect,
    request,
)

from ..accounts import get_accounts
from ..auth.errors import AuthError
from ..auth.guard import ADMIN_REQUIRED, LOGIN_REQUIRED
from ..navigation import safe_next_url
from ..stores.search import SortOrder
from ..stores.ui import Theme
from .guarding import current_session, get_jwt_manager, guarded


web_bp = Blueprint("web", __name__)

DEFAULT_AFTER_LOGIN = "/accountCenter"


def _theme() -> str:
    value = request.cookies.get(current_app.config["THEME_COOKIE_NAME"])
    try:
        return Theme(value).value
    except ValueError:
        return Theme.LIGHT.value


def _page(name: str, status: int = 200, **extra):
    """页面本身的排版不在本项目范围内，这里只返回页面名与需要展示的数据。"""
    _, user = current_session()
    body = {
        "page": name,
        "identity": user.to_dict() if user else None,
        "theme": _theme(),
        **extra,
    }
    return jsonify(body), status


def _set_cookie(resp, name: str, value: str, max_age: int) -> None:
    resp.set_cookie(
        name,
        value,
        max_age=max_age,
        httponly=True,
        samesite="Lax",
        secure=current_app.config["COOKIE_SECURE"],
        path="/",
    )


@web_bp.get("/")
def index():
    """网站首页：显示当前是否已登录。"""
    return _page("home")


@web_bp.get("/search")
def search():
    """搜索页：规范化 q / tag / sort 参数（空白关键词视为没有关键词）。"""
    keyword = (request.args.get("q") or "").strip()
    sort_order = SortOrder.parse(request.args.get("sort"), default=SortOrder.COMPREHENSIVE)
    return _page("search", query={
        "q": keyword,
        "tag": request.args.get("tag", ""),
        "sort": sort_order.value,
    })


@web_bp.get("/login")
def login_page():
    """显示登录页面。如果有 next 参数（登录成功后要跳转的地址），先做安全校验。"""
    return _page("login", next_url=safe_next_url(request.args.get("next")))


@web_bp.post("/login")
def login_post():
    """处理登录表单：签发 JWT，并把令牌放到 Cookie。

    给新手的解释：
    - 登录成功后跳转的目标按顺序选择：表单里的 next → 被守卫拦下时记住的地址 → 个人中心。
    - 记住的地址用完就删掉，避免下次登录又跳到旧地址。
    """
    data = request.form or request.get_json(silent=True) or {}
    username = data.get("username")
    password = data.get("password")
    next_url = safe_next_url(data.get("next"))

    if not username or not password:
        return _page("login", status=400, error="请输入用户名与密码", next_url=next_url)

    user = get_accounts().authenticate(username, password)
    if user is None:
        return _page("login", status=400, error="用户名或密码错误", next_url=next_url)

    identity = {"uid": user.user_id, "uname": user.username, "role": int(user.role)}
    manager = get_jwt_manager()
    access = manager.encode_access_token(identity)
    refresh = manager.encode_refresh_token(identity)

    cfg = current_app.config
    remembered = safe_next_url(request.cookies.get(cfg["REDIRECT_COOKIE_NAME"]))
    target = next_url or remembered or DEFAULT_AFTER_LOGIN
    current_app.logger.info(f"用户 {user.username} 登录成功，跳转到 {target}")

    resp = make_response(redirect(target))
    _set_cookie(resp, cfg["ACCESS_COOKIE_NAME"], access, int(manager.access_expires))
    _set_cookie(resp, cfg["REFRESH_COOKIE_NAME"], refresh, int(manager.refresh_expires))
    resp.delete_cookie(cfg["REDIRECT_COOKIE_NAME"], path="/")
    return resp


@web_bp.post("/register")
def register_post():
    data = request.form or request.get_json(silent=True) or {}
    accounts = get_accounts()
    if accounts.exists(data.get("username", "")):
        return _page("register", status=409, error="用户名已存在")
    try:
        user = accounts.register(
            data.get("username", ""),
            data.get("password", ""),
            email=data.get("email") or None,
            phone=data.get("phone") or None,
        )
    except AuthError as e:
        return _page("register", status=400, error=e.message)
    return _page("login", message=f"注册成功：{user.username}，请登录")


@web_bp.get("/logout")
def logout():
    """退出登录：删除 Cookie 中的令牌，然后返回首页。"""
    cfg = current_app.config
    resp = make_response(redirect("/"))
    resp.delete_cookie(cfg["ACCESS_COOKIE_NAME"], path="/")
    resp.delete_cookie(cfg["REFRESH_COOKIE_NAME"], path="/")
    return resp


@web_bp.post("/theme")
def set_theme():
    """切换主题；表单里带 theme=light/dark 时直接设置。"""
    requested = (request.form or request.get_json(silent=True) or {}).get("theme")
    if requested:
        try:
            theme = Theme(requested)
        except ValueError:
            return jsonify({"error": f"unknown theme: {requested}"}), 400
    else:
        theme = Theme.DARK if _theme() == Theme.LIGHT.value else Theme.LIGHT
    resp = make_response(jsonify({"theme": theme.value}))
    resp.set_cookie(current_app.config["THEME_COOKIE_NAME"], theme.value, max_age=86400 * 365,
                    samesite="Lax", path="/")
    return resp


@web_bp.get("/400")
def login_required_page():
    """需要登录：提示用户登录，登录后会回到原来的页面。"""
    return _page("login-required", status=401)


@web_bp.get("/403")
def forbidden_page():
    return _page("forbidden", status=403)


# ===============
# 受保护的页面
# ===============
@web_bp.get("/accountCenter")
@guarded(LOGIN_REQUIRED)
def account_center():
    return _page("accountCenter")


@web_bp.get("/creatorCenter")
@guarded(LOGIN_REQUIRED)
def creator_center():
    return _page("creatorCenter")


@web_bp.get("/editor")
@guarded(LOGIN_REQUIRED)
def editor():
    return _page("editor")


@web_bp.get("/create")
@guarded(LOGIN_REQUIRED)
def create():
    return _page("create")


@web_bp.get("/adminCenter")
@guarded(ADMIN_REQUIRED)
def admin_center():
    """管理后台：只有管理员（role=1）可以访问。"""
    return _page("adminCenter", admin=g.user.username)
