# storefront/models/notification.py
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Any

from storefront.utils.datetime_utils import DateTimeUtils

class NotificationType(Enum):
    """알림 유형을 정의하는 Enum 클래스"""
    COMMENT_REPLY = "COMMENT_REPLY"
    ADMIN_REPLY = "ADMIN_REPLY"
    COMMENT_LIKE = "COMMENT_LIKE"

@dataclass
class Notification:
    """
    Firestore 'notifications' 컬렉션의 문서 구조를 정의하는 데이터클래스.
    """
    notification_id: str
    recipient_id: str      # 알림을 받는 사용자 ID
    sender: Dict[str, Any] # 알림을 유발한 사용자/관리자 정보
    type: NotificationType
    title: str
    message: str
    link: str = ""         # 클릭 시 이동할 상품 페이지 경로
    is_read: bool = False
    created_at: datetime = field(default_factory=DateTimeUtils.now)
