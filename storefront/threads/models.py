# storefront/threads/models.py
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional, Dict, Any, FrozenSet, Tuple, Iterable

from storefront.utils.datetime_utils import DateTimeUtils


@dataclass(frozen=True)
class AuthorRef:
    """
    댓글 작성자 참조.
    일반 사용자(user_id) 또는 관리자 표식(is_admin) 중 정확히 하나만 가집니다.
    """
    user_id: Optional[str] = None
    nickname: Optional[str] = None
    avatar_url: Optional[str] = None
    is_admin: bool = False

    def __post_init__(self):
        if self.is_admin and self.user_id is not None:
            raise ValueError("관리자 작성자는 user_id 를 가질 수 없습니다.")
        if not self.is_admin and not self.user_id:
            raise ValueError("작성자에는 user_id 또는 관리자 표식이 필요합니다.")

    @classmethod
    def admin(cls, nickname: Optional[str] = None) -> "AuthorRef":
        return cls(nickname=nickname, is_admin=True)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AuthorRef":
        data = data or {}
        if data.get('is_admin'):
            return cls.admin(nickname=data.get('nickname'))
        return cls(
            user_id=data.get('user_id'),
            nickname=data.get('nickname'),
            avatar_url=data.get('profile_image_url'),
        )


@dataclass(frozen=True)
class CommentRecord:
    """API 로부터 받은 댓글 한 건 (불변)."""
    comment_id: str
    product_id: str
    author: AuthorRef
    content: str
    created_at: datetime
    parent_id: Optional[str] = None
    liked_by: FrozenSet[str] = field(default_factory=frozenset)
    images: Tuple[str, ...] = ()

    def __post_init__(self):
        # 정렬 비교를 위해 created_at 은 항상 UTC aware 로 보관합니다.
        object.__setattr__(self, 'created_at', DateTimeUtils.ensure_utc(self.created_at))

    @property
    def like_count(self) -> int:
        return len(self.liked_by)

    def is_liked_by(self, user_id: Optional[str]) -> bool:
        return user_id is not None and user_id in self.liked_by

    def with_likes(self, liked_by: Iterable[str]) -> "CommentRecord":
        return replace(self, liked_by=frozenset(liked_by))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CommentRecord":
        """댓글 응답 JSON(snake_case)을 CommentRecord 로 변환합니다."""
        created_at = data['created_at']
        if isinstance(created_at, str):
            created_at = DateTimeUtils.parse_iso_datetime(created_at)
        return cls(
            comment_id=data['comment_id'],
            product_id=data['product_id'],
            author=AuthorRef.from_dict(data.get('author')),
            content=data['content'],
            created_at=created_at,
            parent_id=data.get('parent_id'),
            liked_by=frozenset(data.get('liked_by') or ()),
            images=tuple(data.get('images') or ()),
        )


@dataclass(frozen=True)
class ThreadNode:
    """CommentRecord 에 정렬된 자식 노드를 붙인 트리 노드. 매 조회마다 새로 만들어집니다."""
    comment: CommentRecord
    children: Tuple["ThreadNode", ...] = ()

    @property
    def comment_id(self) -> str:
        return self.comment.comment_id

    @property
    def reply_count(self) -> int:
        """모든 하위 답글 수"""
        total = 0
        stack = list(self.children)
        while stack:
            node = stack.pop()
            total += 1
            stack.extend(node.children)
        return total


@dataclass(frozen=True)
class Pagination:
    current_page: int
    total_pages: int
    total_comments: int
    per_page: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pagination":
        return cls(
            current_page=int(data.get('current_page', 1)),
            total_pages=int(data.get('total_pages', 0)),
            total_comments=int(data.get('total_comments', 0)),
            per_page=int(data.get('per_page', 0)),
        )

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1
