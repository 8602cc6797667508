from .jwt_handler import create_access_token, verify_access_token
from .dependencies import AdminIdentity, get_current_admin, require_superadmin
from .rate_limiter import limiter, admin_id_or_ip

__all__ = [
    "create_access_token",
    "verify_access_token",
    "AdminIdentity",
    "get_current_admin",
    "require_superadmin",
    "limiter",
    "admin_id_or_ip"
]
