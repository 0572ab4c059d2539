# storefront/threads/coordinator.py
"""
댓글 스레드의 조회/작성/좋아요를 조율하는 모듈

- 서버 요청이 끝난 뒤에만 로컬 상태를 바꿉니다. 실패하면 아무것도 바뀌지 않습니다.
- 새 댓글은 재조회 없이 로컬 목록 앞에 추가하고 트리를 다시 만듭니다.
- 좋아요는 서버가 돌려준 결과만 반영합니다 (낙관적 업데이트 없음).
- 다른 상품으로 이동한 뒤 도착한 응답은 버립니다.
"""

import logging
import uuid
from typing import Optional, Set, Tuple

from storefront.threads.errors import CommentValidationError, RequestFailure, SubmissionInProgress
from storefront.threads.models import CommentRecord, Pagination, ThreadNode
from storefront.threads.presenter import ThreadPresenter
from storefront.threads.reply_state import Composing
from storefront.threads.store import CommentStore, LikeState
from storefront.threads.tree_builder import build_forest

logger = logging.getLogger(__name__)


class CommentThreadCoordinator:
    """상품 하나의 댓글 목록(in-memory)과 트리, 화면 상태를 함께 관리합니다."""

    def __init__(self, store: CommentStore, presenter: Optional[ThreadPresenter] = None,
                 actor_id: Optional[str] = None, page_size: int = 10):
        self.store = store
        self.presenter = presenter or ThreadPresenter()
        self.actor_id = actor_id
        self.page_size = page_size

        self.product_id: Optional[str] = None
        self.page = 1
        self.pagination: Optional[Pagination] = None
        self.comments: Tuple[CommentRecord, ...] = ()
        self.notice: Optional[RequestFailure] = None
        self.loading = False

        self._generation = 0
        self._in_flight: Set[Tuple[int, str, Optional[str]]] = set()

    @property
    def forest(self) -> Tuple[ThreadNode, ...]:
        return self.presenter.forest

    # --- 로그인 상태 ---
    def sign_in(self, actor_id: str) -> None:
        self.actor_id = actor_id

    def sign_out(self) -> None:
        self.actor_id = None
        self.presenter.cancel_reply()

    # --- 조회 ---
    def open_product(self, product_id: str, page: int = 1) -> bool:
        """다른 상품으로 전환합니다. 이전 상품의 댓글과 화면 상태는 버립니다."""
        self._generation += 1
        self.product_id = product_id
        self.page = page
        self.pagination = None
        self.notice = None
        self.comments = ()
        self.presenter.reset()
        return self.load(page)

    def load(self, page: Optional[int] = None) -> bool:
        """
        현재 상품의 댓글을 다시 불러옵니다.
        실패하면 이전 트리를 그대로 두고 알림을 남긴 뒤 RequestFailure 를 다시 발생시킵니다.
        응답이 도착하기 전에 상품이 바뀌었다면 False 를 반환합니다.
        """
        product_id = self._require_product()
        page = page or self.page
        generation = self._generation
        self.loading = True
        try:
            result = self.store.fetch_comments(product_id, page, self.page_size)
        except RequestFailure as e:
            if self._is_current(generation):
                self.notice = e
            raise
        finally:
            # 실패 종류와 관계없이 현재 상품의 로딩 표시는 해제합니다.
            if self._is_current(generation):
                self.loading = False

        if not self._is_current(generation):
            logger.debug(f"이전 상품({product_id})의 댓글 응답을 무시합니다.")
            return False

        self.page = page
        self.pagination = result.pagination
        self._replace_comments(result.comments)
        return True

    # --- 작성 ---
    def create_top_level_comment(self, content: str) -> CommentRecord:
        comment, applied = self._create(content, parent_id=None)
        if applied:
            self.presenter.top_level_draft = ""
        return comment

    def create_reply(self, parent_id: str, content: str) -> CommentRecord:
        """
        답글 작성에 성공하면 부모 댓글을 자동으로 펼칩니다.
        작성 슬롯은 그 부모 댓글에 답글을 쓰던 중일 때만 초기화합니다.
        """
        comment, applied = self._create(content, parent_id=parent_id)
        if applied:
            self.presenter.expand(parent_id)
            if self.presenter.is_replying(parent_id):
                self.presenter.cancel_reply()
        return comment

    def submit_top_level(self) -> CommentRecord:
        """최상위 입력창의 초안으로 댓글을 작성합니다."""
        return self.create_top_level_comment(self.presenter.top_level_draft)

    def submit_reply(self) -> CommentRecord:
        """답글 작성 슬롯의 초안으로 답글을 작성합니다."""
        state = self.presenter.reply_state
        if not isinstance(state, Composing):
            raise CommentValidationError("답글을 작성할 댓글을 먼저 선택해주세요.")
        return self.create_reply(state.node_id, state.draft)

    def _create(self, content: Optional[str], parent_id: Optional[str]) -> Tuple[CommentRecord, bool]:
        product_id = self._require_product()
        self._require_actor()
        text = (content or "").strip()
        if not text:
            raise CommentValidationError("댓글 내용을 입력해주세요.")
        if parent_id is not None and self._find(parent_id) is None:
            raise CommentValidationError("답글을 작성할 댓글을 찾을 수 없습니다.")

        generation = self._generation
        with self._claim('create', parent_id):
            try:
                comment = self.store.create_comment(
                    product_id, text, parent_id=parent_id, client_token=uuid.uuid4().hex
                )
            except RequestFailure as e:
                self._record_failure(generation, e)
                raise

        if not self._is_current(generation):
            logger.debug(f"이전 상품({product_id})에 작성된 댓글 응답을 무시합니다: {comment.comment_id}")
            return comment, False

        others = tuple(c for c in self.comments if c.comment_id != comment.comment_id)
        self._replace_comments((comment,) + others)
        return comment, True

    # --- 좋아요 / 삭제 ---
    def toggle_like(self, comment_id: str) -> LikeState:
        """서버의 확정 결과를 받은 뒤에 liked_by 를 갱신합니다."""
        self._require_product()
        self._require_actor()
        if self._find(comment_id) is None:
            raise CommentValidationError("좋아요를 누를 댓글을 찾을 수 없습니다.")

        generation = self._generation
        with self._claim('like', comment_id):
            try:
                state = self.store.toggle_like(comment_id)
            except RequestFailure as e:
                self._record_failure(generation, e)
                raise

        if self._is_current(generation):
            self._replace_comments(tuple(
                c.with_likes(state.liked_by) if c.comment_id == comment_id else c
                for c in self.comments
            ))
        return state

    def delete_comment(self, comment_id: str) -> None:
        """본인 댓글을 삭제합니다. 남은 답글은 루트로 표시됩니다."""
        self._require_product()
        actor_id = self._require_actor()
        comment = self._find(comment_id)
        if comment is None:
            raise CommentValidationError("삭제할 댓글을 찾을 수 없습니다.")
        if comment.author.user_id != actor_id:
            raise CommentValidationError("본인이 작성한 댓글만 삭제할 수 있습니다.")

        generation = self._generation
        with self._claim('delete', comment_id):
            try:
                self.store.delete_comment(comment_id)
            except RequestFailure as e:
                self._record_failure(generation, e)
                raise

        if self._is_current(generation):
            self._replace_comments(tuple(c for c in self.comments if c.comment_id != comment_id))

    def dismiss_notice(self) -> None:
        self.notice = None

    # --- 내부 도우미 ---
    def _require_product(self) -> str:
        if self.product_id is None:
            raise CommentValidationError("상품이 선택되지 않았습니다.")
        return self.product_id

    def _require_actor(self) -> str:
        if not self.actor_id:
            raise CommentValidationError("로그인이 필요합니다.")
        return self.actor_id

    def _find(self, comment_id: str) -> Optional[CommentRecord]:
        return next((c for c in self.comments if c.comment_id == comment_id), None)

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _record_failure(self, generation: int, error: RequestFailure) -> None:
        if self._is_current(generation):
            self.notice = error

    def _replace_comments(self, comments: Tuple[CommentRecord, ...]) -> None:
        self.comments = tuple(comments)
        self.presenter.set_forest(build_forest(self.comments))

    def _claim(self, action: str, target: Optional[str]) -> "_InFlight":
        key = (self._generation, action, target)
        if key in self._in_flight:
            raise SubmissionInProgress("요청을 처리 중입니다. 잠시 후 다시 시도해주세요.")
        return _InFlight(self._in_flight, key)


class _InFlight:
    """처리 중인 요청 키를 등록하고, 완료(성공/실패) 시 해제합니다."""

    def __init__(self, registry: Set, key):
        self.registry = registry
        self.key = key

    def __enter__(self):
        self.registry.add(self.key)
        return self

    def __exit__(self, exc_type, exc, tb):
        self.registry.discard(self.key)
        return False
