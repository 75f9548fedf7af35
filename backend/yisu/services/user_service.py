"""
账号服务 - 商户 / 管理员注册与登录
"""
from typing import Optional
import logging
from sqlalchemy.orm import Session
from yisu.exceptions import AuthenticationError, ConflictError
from yisu.models.ontology import User, UserRole
from yisu.models.schemas import RegisterRequest, LoginRequest
from yisu.security.auth import get_password_hash, verify_password, create_access_token

logger = logging.getLogger(__name__)


class UserService:
    """账号服务"""

    def __init__(self, db: Session):
        self.db = db

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def register(self, data: RegisterRequest) -> User:
        """注册账号"""
        username = data.username.strip()
        if self.get_user_by_username(username):
            raise ConflictError("Username already exists")

        user = User(
            username=username,
            password_hash=get_password_hash(data.password),
            role=data.role,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"User registered: {user.username} ({user.role.value})")
        return user

    def authenticate(self, data: LoginRequest) -> dict:
        """登录，返回 token 与用户信息"""
        user = self.get_user_by_username(data.username.strip())
        if not user or not verify_password(data.password, user.password_hash):
            raise AuthenticationError("Invalid credentials")

        # 传了 role 时需与账号角色一致
        if data.role is not None and user.role != UserRole(data.role):
            raise AuthenticationError("Role mismatch")

        return {
            "token": create_access_token(user.id, user.role, user.username),
            "user": {"id": user.id, "username": user.username, "role": user.role},
        }
