# storefront/threads/store.py
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Protocol, Tuple

from storefront.threads.models import CommentRecord, Pagination


@dataclass(frozen=True)
class CommentPage:
    """한 페이지 분량의 댓글과 페이지 정보"""
    comments: Tuple[CommentRecord, ...]
    pagination: Optional[Pagination] = None


@dataclass(frozen=True)
class LikeState:
    """서버가 확정한 좋아요 상태"""
    comment_id: str
    liked: bool
    liked_by: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def like_count(self) -> int:
        return len(self.liked_by)


class CommentStore(Protocol):
    """스레드 엔진이 사용하는 댓글 저장소 인터페이스 (HTTP API 등)"""

    def fetch_comments(self, product_id: str, page: int, page_size: int) -> CommentPage:
        ...

    def create_comment(
        self,
        product_id: str,
        content: str,
        parent_id: Optional[str] = None,
        client_token: Optional[str] = None,
    ) -> CommentRecord:
        ...

    def toggle_like(self, comment_id: str) -> LikeState:
        ...

    def delete_comment(self, comment_id: str) -> None:
        ...
