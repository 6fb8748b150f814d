"""Flask 蓝图：/api 下的认证后端接口，以及站点页面路由。"""

from .api import api_bp
from .web import web_bp
