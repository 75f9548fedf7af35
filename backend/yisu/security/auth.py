"""
认证模块
bcrypt 密码哈希 + JWT bearer token；公共（游客）接口不需要认证
"""
import bcrypt
import logging
from datetime import datetime, timedelta, UTC
from typing import List, Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy.orm import Session
from yisu.config import settings
from yisu.database import get_db
from yisu.exceptions import AuthenticationError, AuthorizationError
from yisu.models.ontology import User, UserRole

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_password_hash(password: str) -> str:
    """密码哈希"""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """验证密码"""
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


def create_access_token(user_id: int, role: UserRole, username: Optional[str] = None,
                        expires_delta: Optional[timedelta] = None) -> str:
    """创建 JWT token，载荷包含用户 id 与角色"""
    expire = datetime.now(UTC) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {
        "sub": str(user_id),
        "role": role.value if isinstance(role, UserRole) else str(role),
        "exp": expire,
    }
    if username is not None:
        to_encode["username"] = username
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    """解码 JWT token"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise AuthenticationError("Your token has expired. Please log in again.")
    except JWTError:
        raise AuthenticationError("Invalid token. Please log in again.")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """获取当前登录用户"""
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access denied. No token provided.")

    payload = decode_token(credentials.credentials)
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token. Please log in again.")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise AuthenticationError("User not found")
    return user


def require_role(allowed_roles: List[UserRole]):
    """角色权限验证依赖"""
    async def role_checker(current_user: User = Depends(get_current_user)):
        if current_user.role not in allowed_roles:
            raise AuthorizationError("Access denied. Insufficient permissions.")
        return current_user
    return role_checker


# 便捷的角色检查器
require_admin = require_role([UserRole.ADMIN])
require_merchant = require_role([UserRole.MERCHANT])
require_any_role = require_role([UserRole.ADMIN, UserRole.MERCHANT])
