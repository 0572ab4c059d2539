# storefront/services/notification_service.py
import logging
import uuid
from dataclasses import asdict
from firebase_admin import firestore
from typing import Any, Dict, Optional

from storefront.models.notification import Notification, NotificationType
from storefront.utils.datetime_utils import DateTimeUtils

class NotificationService:
    """
    알림 관련 비즈니스 로직을 담당하는 공용 서비스 클래스.
    알림 생성 실패는 로그만 남기고 호출한 쪽(댓글 작성/좋아요)으로 전파하지 않습니다.
    """
    def __init__(self, db=None):
        self.db = db or firestore.client()
        self.notifications_ref = self.db.collection('notifications')

    def create_notification(self, recipient_id: Optional[str], sender: Dict[str, Any], n_type: NotificationType,
                            title: str, message: str, link: str = "") -> Optional[str]:
        """
        알림을 생성하여 Firestore에 저장합니다.
        - 수신자가 없거나(관리자 댓글 등) 자기 자신에게 보내는 알림은 생성하지 않습니다.

        :param recipient_id: 알림을 받을 사용자 ID
        :param sender: 알림을 유발한 작성자 정보 (댓글의 author 형식)
        :param n_type: 알림 유형 (NotificationType Enum)
        :param title: 알림 제목
        :param message: 알림 본문 (예: 댓글 내용 요약)
        :param link: 알림 클릭 시 이동할 경로
        :return: 생성된 알림 ID, 생성하지 않은 경우 None
        """
        if not recipient_id or recipient_id == sender.get('user_id'):
            return None

        try:
            notification = Notification(
                notification_id=str(uuid.uuid4()),
                recipient_id=recipient_id,
                sender=sender,
                type=n_type,
                title=title,
                message=message,
                link=link,
            )

            # Enum 멤버를 문자열 값으로 변환하여 저장
            notification_dict = asdict(notification)
            notification_dict['type'] = notification.type.value

            self.notifications_ref.document(notification.notification_id).set(
                DateTimeUtils.for_firestore(notification_dict)
            )
            logging.info(f"{n_type.value} 알림 생성 완료: {sender.get('user_id') or 'admin'} -> {recipient_id}")
            return notification.notification_id

        except Exception as e:
            logging.error(f"알림 생성 중 오류 발생: {e}", exc_info=True)
            return None
