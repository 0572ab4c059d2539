# storefront/threads/presenter.py
import logging
from dataclasses import dataclass
from typing import Dict, List, Set, Tuple

from storefront.threads import reply_state
from storefront.threads.models import ThreadNode
from storefront.threads.reply_state import IDLE, Composing, ReplyState
from storefront.threads.tree_builder import MAX_INDENT_DEPTH, ThreadRow, flatten_forest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeState:
    """노드 하나의 {collapsed, expanded} x {not-replying, replying} 상태"""
    expanded: bool
    replying: bool


class ThreadPresenter:
    """
    댓글 트리의 화면 상호작용 상태를 관리하는 클래스.
    - 노드별 답글 펼침/접힘 (기본값: 접힘)
    - 전체에서 하나뿐인 답글 작성 슬롯 (ReplyState)
    - 최상위 댓글 입력창 초안
    """

    def __init__(self, max_indent: int = MAX_INDENT_DEPTH):
        self.max_indent = max_indent
        self.forest: Tuple[ThreadNode, ...] = ()
        self.reply_state: ReplyState = IDLE
        self.top_level_draft: str = ""
        self._expanded: Set[str] = set()
        self._nodes: Dict[str, ThreadNode] = {}

    def set_forest(self, forest: Tuple[ThreadNode, ...]) -> None:
        """새로 만든 트리로 교체합니다. 사라진 노드의 UI 상태는 정리됩니다."""
        self.forest = tuple(forest)
        self._nodes = {row.node.comment_id: row.node for row in flatten_forest(self.forest)}
        self._expanded &= set(self._nodes)
        target = self.reply_state.node_id
        if target is not None and target not in self._nodes:
            logger.debug(f"답글 대상 댓글({target})이 사라져 작성 상태를 초기화합니다.")
            self.reply_state = IDLE

    def reset(self) -> None:
        self.forest = ()
        self._nodes = {}
        self._expanded.clear()
        self.reply_state = IDLE
        self.top_level_draft = ""

    def _node(self, node_id: str) -> ThreadNode:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise KeyError(f"트리에 없는 댓글입니다: {node_id}") from None

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._nodes

    # --- 펼침/접힘 ---
    def is_expanded(self, node_id: str) -> bool:
        return bool(self._node(node_id).children) and node_id in self._expanded

    def expand(self, node_id: str) -> None:
        """답글이 없는 노드는 펼치지 않습니다. 나중에 답글이 생겨도 접힌 상태로 시작합니다."""
        if self._node(node_id).children:
            self._expanded.add(node_id)

    def collapse(self, node_id: str) -> None:
        self._node(node_id)
        self._expanded.discard(node_id)

    def toggle_expanded(self, node_id: str) -> bool:
        """'답글 보기' 토글. 변경 후 펼침 여부를 반환합니다."""
        if node_id in self._expanded:
            self.collapse(node_id)
        else:
            self.expand(node_id)
        return self.is_expanded(node_id)

    # --- 답글 작성 ---
    def start_reply(self, node_id: str) -> None:
        self._node(node_id)
        self.reply_state = reply_state.start_reply(self.reply_state, node_id)

    def update_reply_draft(self, text: str) -> None:
        self.reply_state = reply_state.update_draft(self.reply_state, text)

    def cancel_reply(self) -> None:
        self.reply_state = reply_state.cancel(self.reply_state)

    def is_replying(self, node_id: str) -> bool:
        return reply_state.is_replying(self.reply_state, node_id)

    @property
    def reply_draft(self) -> str:
        if isinstance(self.reply_state, Composing):
            return self.reply_state.draft
        return ""

    def node_state(self, node_id: str) -> NodeState:
        return NodeState(expanded=self.is_expanded(node_id), replying=self.is_replying(node_id))

    # --- 렌더링 ---
    def indent_for(self, depth: int) -> int:
        """들여쓰기는 max_indent 에서 멈추지만 더 깊은 답글도 그대로 표시됩니다."""
        return min(depth, self.max_indent)

    def rows(self) -> List[ThreadRow]:
        """현재 펼침 상태에서 보이는 노드들을 화면 순서대로 반환합니다."""
        return flatten_forest(self.forest, is_expanded=self._expanded.__contains__, max_indent=self.max_indent)
