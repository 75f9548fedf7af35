"""
认证路由
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from yisu.database import get_db
from yisu.models.ontology import User
from yisu.models.schemas import RegisterRequest, LoginRequest, LoginResponse, UserResponse
from yisu.services.user_service import UserService
from yisu.security.auth import get_current_user

router = APIRouter(prefix="/auth", tags=["认证"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """注册商户 / 管理员账号"""
    user = UserService(db).register(data)
    return UserResponse.model_validate(user)


@router.post("/login", response_model=LoginResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """用户登录"""
    return LoginResponse(**UserService(db).authenticate(data))


@router.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """获取当前用户信息"""
    return UserResponse.model_validate(current_user)
