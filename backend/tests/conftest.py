"""
Pytest 配置和共享 fixtures
"""
import os

# 应用启动时 init_db 使用的库，避免在工作目录生成文件
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from datetime import date
from decimal import Decimal
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from yisu.database import Base, get_db
from yisu.models import ontology  # noqa: F401
from yisu.models.ontology import (
    User, UserRole, Hotel, HotelStatus, RoomType, CancelPolicy
)
from yisu.security.auth import get_password_hash, create_access_token
from yisu.main import app


@pytest.fixture(scope="function")
def db_engine():
    """创建内存数据库引擎"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(db_engine):
    """创建数据库会话"""
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture(scope="function")
def client(db_session):
    """创建测试客户端"""
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def published_events():
    """收集服务发布的事件（注入为 event_publisher）"""
    events = []
    return events


# ============== 认证相关 Fixtures ==============

def _create_user(db_session, username: str, role: UserRole) -> User:
    user = User(
        username=username,
        password_hash=get_password_hash("123456"),
        role=role,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def admin_user(db_session):
    """创建管理员"""
    return _create_user(db_session, "admin", UserRole.ADMIN)


@pytest.fixture
def merchant_user(db_session):
    """创建商户"""
    return _create_user(db_session, "merchant1", UserRole.MERCHANT)


@pytest.fixture
def other_merchant(db_session):
    """创建另一个商户"""
    return _create_user(db_session, "merchant2", UserRole.MERCHANT)


@pytest.fixture
def admin_auth_headers(admin_user):
    token = create_access_token(admin_user.id, admin_user.role, admin_user.username)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def merchant_auth_headers(merchant_user):
    token = create_access_token(merchant_user.id, merchant_user.role, merchant_user.username)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_merchant_auth_headers(other_merchant):
    token = create_access_token(other_merchant.id, other_merchant.role, other_merchant.username)
    return {"Authorization": f"Bearer {token}"}


# ============== 实体相关 Fixtures ==============

@pytest.fixture
def make_hotel(db_session, merchant_user):
    """
    酒店工厂

    make_hotel(name_cn="...", status=HotelStatus.APPROVED, room_types=[{"type": ..., "price": ...}])
    """
    def _make(room_types=None, owner=None, **fields):
        values = {
            "name_cn": "易宿大酒店",
            "name_en": "Yi-Su Grand Hotel",
            "address": "上海市浦东新区世纪大道 100 号",
            "city": "上海",
            "star_rating": 5,
            "opening_date": date(2024, 1, 1),
            "status": HotelStatus.APPROVED,
            "featured": False,
        }
        values.update(fields)
        hotel = Hotel(created_by=(owner or merchant_user).id, **values)
        if room_types is None:
            room_types = [{"type": "标准间", "price": Decimal("399")}]
        hotel.room_types = [RoomType(**rt) for rt in room_types]
        db_session.add(hotel)
        db_session.commit()
        db_session.refresh(hotel)
        return hotel
    return _make


@pytest.fixture
def approved_hotel(make_hotel):
    """已发布酒店：标准间 399（免费取消）、豪华间 699（不可取消）"""
    return make_hotel(
        tags=["豪华", "亲子"],
        featured=True,
        banner_image="https://example.com/banner1.jpg",
        room_types=[
            {"type": "标准间", "price": Decimal("399"), "bed_type": "双床",
             "breakfast_included": True, "inventory": 10},
            {"type": "豪华间", "price": Decimal("699"), "bed_type": "大床",
             "cancel_policy": CancelPolicy.NON_REFUNDABLE, "inventory": 3},
        ],
    )


@pytest.fixture
def standard_room(approved_hotel):
    return approved_hotel.room_types[0]


@pytest.fixture
def deluxe_room(approved_hotel):
    return approved_hotel.room_types[1]
