"""
初始化演示数据
创建：管理员与商户账号、两家已发布的上海酒店

默认账号（密码均为 123456）：
  admin       管理员
  merchant1   商户

重复执行不会产生重复数据
"""
from datetime import date
from decimal import Decimal
from sqlalchemy.orm import Session
from yisu.database import SessionLocal, init_db
from yisu.models.ontology import (
    User, UserRole, Hotel, HotelStatus, RoomType, CancelPolicy
)
from yisu.security.auth import get_password_hash

DEFAULT_PASSWORD = "123456"

SEED_HOTELS = [
    {
        "name_cn": "易宿大酒店",
        "name_en": "Yi-Su Grand Hotel",
        "city": "上海",
        "address": "上海市浦东新区世纪大道 100 号",
        "star_rating": 5,
        "opening_date": date(2024, 1, 1),
        "featured": True,
        "banner_image": "https://example.com/banner1.jpg",
        "images": ["https://example.com/cover1.jpg"],
        "tags": ["豪华", "亲子", "免费停车"],
        "amenities": ["免费WiFi", "健身房", "早餐"],
        "room_types": [
            {"type": "标准间", "price": Decimal("399"), "bed_type": "双床", "breakfast_included": True},
            {"type": "豪华间", "price": Decimal("699"), "bed_type": "大床", "breakfast_included": True,
             "cancel_policy": CancelPolicy.NON_REFUNDABLE},
        ],
    },
    {
        "name_cn": "易宿商务酒店",
        "name_en": "Yi-Su Business Hotel",
        "city": "上海",
        "address": "上海市徐汇区漕溪北路 200 号",
        "star_rating": 4,
        "opening_date": date(2020, 6, 1),
        "featured": False,
        "tags": ["商务", "近地铁"],
        "room_types": [
            {"type": "大床房", "price": Decimal("299"), "bed_type": "大床"},
        ],
    },
]


def seed_users(db: Session) -> dict:
    """创建默认账号，返回 {username: User}"""
    users = {}
    for username, role in (("admin", UserRole.ADMIN), ("merchant1", UserRole.MERCHANT)):
        user = db.query(User).filter(User.username == username).first()
        if not user:
            user = User(
                username=username,
                password_hash=get_password_hash(DEFAULT_PASSWORD),
                role=role,
            )
            db.add(user)
            db.flush()
        users[username] = user
    db.commit()
    return users


def seed_hotels(db: Session, merchant: User) -> int:
    """创建已发布的演示酒店，按中文名去重"""
    created = 0
    for item in SEED_HOTELS:
        if db.query(Hotel).filter(Hotel.name_cn == item["name_cn"]).first():
            continue
        values = {k: v for k, v in item.items() if k != "room_types"}
        hotel = Hotel(**values, status=HotelStatus.APPROVED, created_by=merchant.id)
        hotel.room_types = [RoomType(**rt) for rt in item["room_types"]]
        db.add(hotel)
        created += 1
    db.commit()
    return created


def main():
    print("=" * 50)
    print("易宿 初始化数据")
    print("=" * 50)

    init_db()
    print("数据库表创建完成")

    db = SessionLocal()
    try:
        users = seed_users(db)
        created = seed_hotels(db, users["merchant1"])
        print(f"酒店初始化完成: 新增 {created} 家")
        print()
        print(f"默认账号（密码均为 {DEFAULT_PASSWORD}）：admin / merchant1")
        print("=" * 50)
    finally:
        db.close()


if __name__ == '__main__':
    main()
