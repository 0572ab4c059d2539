# storefront/core/security.py
from functools import wraps
from flask import jsonify
from flask_jwt_extended import verify_jwt_in_request, get_jwt

ADMIN_ROLE = "admin"

def is_admin_claims(claims: dict) -> bool:
    return claims.get("role") == ADMIN_ROLE

def admin_required(f):
    """
    관리자 전용 엔드포인트 데코레이터.
    - 토큰이 없거나 유효하지 않으면 flask_jwt_extended 가 401 을 응답합니다.
    - 토큰의 role 클레임이 'admin' 이 아니면 403 을 응답합니다.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        verify_jwt_in_request()
        if not is_admin_claims(get_jwt()):
            return jsonify({"error_code": "FORBIDDEN", "message": "관리자만 접근할 수 있습니다."}), 403
        return f(*args, **kwargs)

    return decorated_function
