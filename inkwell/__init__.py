from typing import Optional

from flask import Flask, jsonify

from .accounts import EXTENSION_KEY, AccountDirectory
from .config import Config


def create_app(config: Optional[object] = None) -> Flask:
    """应用工厂：创建并配置一个 Flask 实例。

    给新手的解释：
    - 这是服务端的入口函数，负责把“配置、账号目录、路由、错误处理”都组装到一个应用对象里。
    - 测试时可以传入自己的配置对象，覆盖默认配置。
    """
    app = Flask(__name__)
    app.config.from_object(config or Config())
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    app.extensions[EXTENSION_KEY] = AccountDirectory.seeded(app.config)

    # 注册蓝图（把不同模块的路由整合到应用里）
    from .routes import api_bp, web_bp
    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(web_bp)

    # 通用错误处理（当接口返回 401/403/404 等时，给出统一格式的 JSON）
    @app.errorhandler(401)
    def unauthorized(_):
        return jsonify({"error": "Unauthorized"}), 401

    @app.errorhandler(403)
    def forbidden(_):
        return jsonify({"error": "Forbidden"}), 403

    @app.errorhandler(404)
    def not_found(_):
        return jsonify({"error": "Not Found"}), 404

    return app
