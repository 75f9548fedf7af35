"""
业务异常定义

服务层抛出以下异常，由 yisu.main 中注册的异常处理器统一转换为
{"message": ..., "code": ...} 形式的 JSON 响应。
"""
from typing import Any, Dict, Optional
from fastapi import status


class AppError(Exception):
    """所有业务异常的基类"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": self.message, "code": self.error_code}
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(AppError):
    """输入格式错误或超出范围"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class AuthenticationError(AppError):
    """缺少、无效或过期的身份令牌"""
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication failed"


class AuthorizationError(AppError):
    """角色或归属不匹配"""
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotFoundError(AppError):
    """资源不存在或不处于期望状态"""
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(AppError):
    """与当前资源状态冲突：售罄、重复取消、不可退订等"""
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict with current state"
