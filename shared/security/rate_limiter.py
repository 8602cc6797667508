from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request

from shared.config.settings import get_settings
from .jwt_handler import verify_access_token

def admin_id_or_ip(request: Request) -> str:
    """
    Key function for SlowAPI.
    Admin calls are keyed by the admin id in the bearer token; shoppers
    (who never authenticate) fall back to the client's IP address.
    """
    auth_header = request.headers.get("Authorization")

    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header.split(" ")[1]
        payload = verify_access_token(token, get_settings())
        if payload and "sub" in payload:
            return f"admin:{payload['sub']}"

    return f"ip:{get_remote_address(request)}"

limiter = Limiter(key_func=admin_id_or_ip)
