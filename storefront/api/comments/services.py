# storefront/api/comments/services.py

import logging
import math
import uuid
from firebase_admin import firestore
from dataclasses import asdict
from typing import Optional, Dict, Any, List, Tuple

from storefront.models.comment import Comment, admin_author
from storefront.models.notification import NotificationType
from storefront.services.notification_service import NotificationService
from storefront.utils.datetime_utils import DateTimeUtils

SUMMARY_LENGTH = 50


class InvalidParentError(ValueError):
    """부모 댓글이 다른 상품에 속해 있어 답글을 달 수 없는 경우"""


class CommentService:
    """
    상품 댓글 관련 비즈니스 로직을 담당하는 서비스 클래스.
    - 댓글/답글 작성, 목록 조회(페이지네이션), 좋아요 토글, 삭제
    - 관리자 답글 및 숨김 처리
    """
    def __init__(self, db=None, notification_service: Optional[NotificationService] = None):
        """서비스 초기화 시 Firestore 클라이언트 및 컬렉션 참조를 설정합니다."""
        self.db = db or firestore.client()
        self.comments_ref = self.db.collection('comments')
        self.users_ref = self.db.collection('users')
        self.notification_service = notification_service

    # --- 조회 ---
    def get_product_comments(self, product_id: str, page: int, limit: int,
                             current_user_id: Optional[str] = None,
                             include_hidden: bool = False) -> Tuple[List[Dict[str, Any]], Dict[str, int]]:
        """특정 상품의 댓글 목록을 최신순으로 페이지네이션하여 조회합니다."""
        query = self.comments_ref.where('product_id', '==', product_id)
        if not include_hidden:
            query = query.where('is_hidden', '==', False)

        total = self._count(query)
        docs = (
            query.order_by('created_at', direction=firestore.Query.DESCENDING)
            .offset((page - 1) * limit)
            .limit(limit)
            .stream()
        )
        comments = [self._with_viewer(DateTimeUtils.from_firestore(doc.to_dict()), current_user_id) for doc in docs]

        pagination = {
            "current_page": page,
            "total_pages": math.ceil(total / limit) if limit else 0,
            "total_comments": total,
            "per_page": limit,
        }
        return comments, pagination

    def get_comment(self, comment_id: str, current_user_id: Optional[str] = None) -> Optional[Dict[str, Any]]:
        doc = self.comments_ref.document(comment_id).get()
        if not doc.exists:
            return None
        return self._with_viewer(DateTimeUtils.from_firestore(doc.to_dict()), current_user_id)

    # --- 작성 ---
    def create_comment(self, product_id: str, author_id: str, content: str, parent_id: Optional[str] = None,
                       images: Optional[List[str]] = None, client_token: Optional[str] = None) -> Dict[str, Any]:
        """
        새 댓글 또는 답글을 작성합니다.
        - client_token 이 같으면 같은 사용자의 재전송 요청으로 보고 기존 댓글을 그대로 반환합니다.
        - 답글인 경우 부모 댓글 작성자에게 알림을 생성합니다.
        """
        author = self._author_for(author_id)
        comment_id = self._comment_id_for(author_id, client_token)
        return self._create(product_id, author, content, parent_id, images, client_token, comment_id,
                            NotificationType.COMMENT_REPLY)

    def create_admin_reply(self, comment_id: str, content: str) -> Dict[str, Any]:
        """관리자 이름으로 답글을 작성하고 원 댓글 작성자에게 알림을 보냅니다."""
        parent_doc = self.comments_ref.document(comment_id).get()
        if not parent_doc.exists:
            raise ValueError("답글을 작성할 댓글이 존재하지 않습니다.")
        product_id = parent_doc.to_dict().get('product_id')
        return self._create(product_id, admin_author(), content, comment_id, None, None, str(uuid.uuid4()),
                            NotificationType.ADMIN_REPLY)

    def _create(self, product_id: str, author: Dict[str, Any], content: str, parent_id: Optional[str],
                images: Optional[List[str]], client_token: Optional[str], comment_id: str,
                reply_type: NotificationType) -> Dict[str, Any]:
        content = content.strip()
        transaction = self.db.transaction()

        @firestore.transactional
        def _create_in_transaction(transaction):
            comment_ref = self.comments_ref.document(comment_id)

            parent_data = None
            if parent_id:
                parent_snapshot = self.comments_ref.document(parent_id).get(transaction=transaction)
                if not parent_snapshot.exists:
                    raise ValueError("답글을 작성할 댓글이 존재하지 않습니다.")
                parent_data = parent_snapshot.to_dict()
                if parent_data.get('product_id') != product_id:
                    raise InvalidParentError("다른 상품의 댓글에는 답글을 작성할 수 없습니다.")

            if client_token:
                existing = comment_ref.get(transaction=transaction)
                if existing.exists:
                    return existing.to_dict(), None

            new_comment = Comment(
                comment_id=comment_id,
                product_id=product_id,
                author=author,
                content=content,
                parent_id=parent_id,
                images=list(images or []),
                client_token=client_token,
            )
            transaction.set(comment_ref, DateTimeUtils.for_firestore(asdict(new_comment)))
            return asdict(new_comment), parent_data

        # 재전송 요청이면 parent_data 가 None 이므로 알림도 다시 만들지 않습니다.
        comment_data, parent_data = _create_in_transaction(transaction)

        if parent_data is not None:
            self._notify(
                recipient_id=parent_data.get('author', {}).get('user_id'),
                sender=author, n_type=reply_type,
                title="새 답글이 달렸습니다",
                message=content[:SUMMARY_LENGTH],
                product_id=product_id,
            )
        else:
            logging.info(f"댓글 작성 완료 (product_id: {product_id}, comment_id: {comment_data.get('comment_id')})")

        return self._with_viewer(DateTimeUtils.from_firestore(comment_data), author.get('user_id'))

    # --- 좋아요 ---
    def toggle_like(self, comment_id: str, user_id: str) -> Dict[str, Any]:
        """
        댓글 좋아요를 누르거나 취소합니다.
        liked_by 의 읽기/수정을 한 트랜잭션에서 처리하므로 같은 사용자가 두 번 들어가지 않습니다.
        """
        transaction = self.db.transaction()

        @firestore.transactional
        def _toggle_like_in_transaction(transaction):
            comment_ref = self.comments_ref.document(comment_id)
            comment_doc = comment_ref.get(transaction=transaction)
            if not comment_doc.exists:
                raise ValueError("좋아요를 누를 댓글을 찾을 수 없습니다.")

            comment_data = comment_doc.to_dict()
            liked_by = list(dict.fromkeys(comment_data.get('liked_by') or []))
            if user_id in liked_by:
                liked_by.remove(user_id)
                liked = False
            else:
                liked_by.append(user_id)
                liked = True
            transaction.update(comment_ref, {'liked_by': liked_by})
            return liked, liked_by, comment_data

        liked, liked_by, comment_data = _toggle_like_in_transaction(transaction)

        if liked:
            self._notify(
                recipient_id=comment_data.get('author', {}).get('user_id'),
                sender=self._author_for(user_id, strict=False),
                n_type=NotificationType.COMMENT_LIKE,
                title="회원님의 댓글을 좋아합니다",
                message=comment_data.get('content', '')[:SUMMARY_LENGTH],
                product_id=comment_data.get('product_id'),
            )

        return {
            "comment_id": comment_id,
            "liked": liked,
            "liked_by": liked_by,
            "like_count": len(liked_by),
        }

    # --- 삭제 / 숨김 ---
    def delete_comment(self, comment_id: str, user_id: str) -> None:
        """댓글을 삭제합니다. (작성자 본인만 가능, 답글은 남겨둡니다)"""
        comment_ref = self.comments_ref.document(comment_id)
        comment_doc = comment_ref.get()
        if not comment_doc.exists:
            raise ValueError("삭제할 댓글이 없습니다.")
        if comment_doc.to_dict().get('author', {}).get('user_id') != user_id:
            raise PermissionError("댓글을 삭제할 권한이 없습니다.")

        comment_ref.delete()
        logging.info(f"댓글 삭제 완료 (comment_id: {comment_id})")

    def set_hidden(self, comment_id: str, is_hidden: bool) -> Dict[str, Any]:
        """관리자가 댓글을 숨기거나 다시 노출합니다."""
        comment_ref = self.comments_ref.document(comment_id)
        comment_doc = comment_ref.get()
        if not comment_doc.exists:
            raise ValueError("댓글을 찾을 수 없습니다.")

        update_data = {'is_hidden': is_hidden, 'updated_at': DateTimeUtils.now()}
        comment_ref.update(update_data)

        comment_data = comment_doc.to_dict()
        comment_data.update(update_data)
        return self._with_viewer(DateTimeUtils.from_firestore(comment_data), None)

    # --- 내부 도우미 ---
    def _author_for(self, user_id: str, strict: bool = True) -> Dict[str, Any]:
        """users 문서에서 댓글에 저장할 작성자 정보를 만듭니다."""
        user_doc = self.users_ref.document(user_id).get()
        if not user_doc.exists:
            if strict:
                raise ValueError("댓글 작성자를 찾을 수 없습니다.")
            return {"user_id": user_id, "nickname": None, "profile_image_url": None, "is_admin": False}

        user_info = user_doc.to_dict()
        return {
            "user_id": user_id,
            "nickname": user_info.get("nickname"),
            "profile_image_url": user_info.get("profile_image_url"),
            "is_admin": False,
        }

    @staticmethod
    def _comment_id_for(author_id: str, client_token: Optional[str]) -> str:
        if client_token:
            return str(uuid.uuid5(uuid.NAMESPACE_URL, f"comment:{author_id}:{client_token}"))
        return str(uuid.uuid4())

    @staticmethod
    def _count(query) -> int:
        result = query.count().get()
        return int(result[0][0].value)

    @staticmethod
    def _with_viewer(comment: Dict[str, Any], current_user_id: Optional[str]) -> Dict[str, Any]:
        """응답 전용 필드(like_count, is_liked)를 채웁니다."""
        liked_by = comment.get('liked_by') or []
        comment['like_count'] = len(liked_by)
        comment['is_liked'] = current_user_id is not None and current_user_id in liked_by
        return comment

    def _notify(self, recipient_id: Optional[str], sender: Dict[str, Any], n_type: NotificationType,
                title: str, message: str, product_id: Optional[str]) -> None:
        if self.notification_service is None:
            return
        self.notification_service.create_notification(
            recipient_id=recipient_id, sender=sender, n_type=n_type,
            title=title, message=message, link=f"/products/{product_id}" if product_id else "",
        )
