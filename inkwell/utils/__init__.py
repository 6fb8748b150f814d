"""实用工具包。

导出常用函数，方便在其他模块中直接引用：
    from inkwell.utils import JWTManager, JWTError
"""

from .jwt import JWTError, JWTManager, extract_claims
