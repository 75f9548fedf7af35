"""
授权策略

所有修改酒店 / 房型的操作统一经过 authorize()：
管理员始终通过，商户只能操作自己创建的资源。
"""
from yisu.exceptions import AuthorizationError
from yisu.models.ontology import User, UserRole


def is_admin(user: User) -> bool:
    return user.role == UserRole.ADMIN


def can_manage(user: User, owner_id: int) -> bool:
    """(调用者, 资源归属) -> 是否允许"""
    if is_admin(user):
        return True
    return user.role == UserRole.MERCHANT and user.id == owner_id


def authorize(user: User, owner_id: int) -> None:
    """不允许时抛出 AuthorizationError"""
    if not can_manage(user, owner_id):
        raise AuthorizationError("Access denied")
