# storefront/models/comment.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, List, Optional

from storefront.utils.datetime_utils import DateTimeUtils

ADMIN_NICKNAME = "관리자"


def admin_author() -> Dict[str, Any]:
    """관리자 답글에 저장되는 작성자 표식. 일반 사용자 참조(user_id)와 함께 쓰지 않습니다."""
    return {"user_id": None, "nickname": ADMIN_NICKNAME, "profile_image_url": None, "is_admin": True}


@dataclass
class Comment:
    """
    Firestore 'comments' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    - parent_id 가 없으면 최상위 댓글, 있으면 같은 상품의 다른 댓글에 대한 답글입니다.
    - liked_by 는 좋아요를 누른 user_id 목록 (중복 없음)
    """
    comment_id: str
    product_id: str
    author: Dict[str, Any]  # {'user_id', 'nickname', 'profile_image_url', 'is_admin'}
    content: str
    parent_id: Optional[str] = None
    images: List[str] = field(default_factory=list)
    liked_by: List[str] = field(default_factory=list)
    is_hidden: bool = False
    client_token: Optional[str] = None
    created_at: datetime = field(default_factory=DateTimeUtils.now)
    updated_at: datetime = field(default_factory=DateTimeUtils.now)
