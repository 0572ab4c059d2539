# storefront/threads/__init__.py
"""
상품 댓글 스레드 엔진

평탄한 댓글 목록 -> 답글 트리 변환, 작성/좋아요 조율, 펼침/답글 작성 상태를 담당합니다.
Flask 앱과 독립적으로 동작합니다.
"""

from .errors import (
    CommentThreadError, CommentValidationError, SubmissionInProgress,
    RequestFailure, ReplyStateError,
)
from .models import AuthorRef, CommentRecord, ThreadNode, Pagination
from .tree_builder import build_forest, flatten_forest, count_nodes, find_node, ThreadRow, MAX_INDENT_DEPTH
from .reply_state import ReplyState, Idle, Composing, IDLE
from .presenter import ThreadPresenter, NodeState
from .store import CommentStore, CommentPage, LikeState
from .client import CommentApiClient
from .coordinator import CommentThreadCoordinator

__all__ = [
    'CommentThreadError', 'CommentValidationError', 'SubmissionInProgress',
    'RequestFailure', 'ReplyStateError',
    'AuthorRef', 'CommentRecord', 'ThreadNode', 'Pagination',
    'build_forest', 'flatten_forest', 'count_nodes', 'find_node', 'ThreadRow', 'MAX_INDENT_DEPTH',
    'ReplyState', 'Idle', 'Composing', 'IDLE',
    'ThreadPresenter', 'NodeState',
    'CommentStore', 'CommentPage', 'LikeState',
    'CommentApiClient',
    'CommentThreadCoordinator',
]
