# Security module
from yisu.security.auth import (
    get_password_hash, verify_password, create_access_token,
    get_current_user, require_role, require_admin, require_merchant, require_any_role
)
from yisu.security.policy import authorize, can_manage, is_admin

__all__ = [
    'get_password_hash', 'verify_password', 'create_access_token',
    'get_current_user', 'require_role', 'require_admin', 'require_merchant',
    'require_any_role', 'authorize', 'can_manage', 'is_admin'
]
