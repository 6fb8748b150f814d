import os


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


class Config:
    """服务端配置类：集中管理所有可调参数。

    给新手的解释：
    - 这儿就像“项目的设置面板”。你可以通过环境变量覆盖默认值，避免把敏感信息写死在代码里。
    - 例如在服务器上设置 JWT_SECRET_KEY=xxxx，即可使用更安全的密钥。
    """
    # Flask 基础密钥（用于会话、CSRF 等，不用于 JWT）
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")

    # JWT 配置
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", os.getenv("JWT_SECRET", "dev-jwt-secret-change-me"))
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_ACCESS_TOKEN_EXPIRES = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES", 3600))  # 1 小时
    JWT_REFRESH_TOKEN_EXPIRES = int(os.getenv("JWT_REFRESH_TOKEN_EXPIRES", 86400 * 7))  # 7 天
    JWT_LEEWAY = int(os.getenv("JWT_LEEWAY", 5))

    # Cookie 名称与属性
    ACCESS_COOKIE_NAME = os.getenv("ACCESS_COOKIE_NAME", "access_token")
    REFRESH_COOKIE_NAME = os.getenv("REFRESH_COOKIE_NAME", "refresh_token")
    REDIRECT_COOKIE_NAME = os.getenv("REDIRECT_COOKIE_NAME", "redirect_after_login")
    THEME_COOKIE_NAME = os.getenv("THEME_COOKIE_NAME", "theme")
    COOKIE_SECURE = _env_bool("COOKIE_SECURE", "false")  # 生产建议 true + https

    # 预置账号（内存“数据库”，服务重启后恢复为初始值）
    SEED_ADMIN_USERNAME = os.getenv("SEED_ADMIN_USERNAME", "admin")
    SEED_ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "admin-change-me")
    SEED_USER_USERNAME = os.getenv("SEED_USER_USERNAME", "reader")
    SEED_USER_PASSWORD = os.getenv("SEED_USER_PASSWORD", "reader-change-me")

    # 日志级别：DEBUG / INFO / WARNING ...
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    JSON_AS_ASCII = False


class ClientConfig:
    """客户端核心（会话、路由守卫、搜索状态）的配置。

    - API_BASE_URL：认证后端地址，默认指向本项目自带的 Flask 服务。
    - USE_MOCK_API：为 true 时使用进程内的模拟认证接口，不发真实网络请求。
    - STORAGE_PATH：持久化存储文件（相当于浏览器的 localStorage）；留空则只保存在内存里。
    """
    API_BASE_URL = os.getenv("INKWELL_API_BASE_URL", "http://localhost:5000")
    API_TIMEOUT = float(os.getenv("INKWELL_API_TIMEOUT", 10.0))  # 秒
    USE_MOCK_API = _env_bool("INKWELL_USE_MOCK_API", "false")
    MOCK_API_DELAY = float(os.getenv("INKWELL_MOCK_API_DELAY", 0.5))  # 模拟网络延迟（秒）
    STORAGE_PATH = os.getenv("INKWELL_STORAGE_PATH", "")
    START_URL = os.getenv("INKWELL_START_URL", "/")
