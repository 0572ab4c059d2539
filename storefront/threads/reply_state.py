# storefront/threads/reply_state.py
"""
화면 전체에서 하나뿐인 답글 작성 슬롯의 상태

ReplyState = Idle | Composing(node_id, draft)
동시에 두 댓글에 답글을 작성하는 상태는 표현할 수 없습니다.
"""

from dataclasses import dataclass, replace
from typing import Optional, Union

from storefront.threads.errors import ReplyStateError


@dataclass(frozen=True)
class Idle:
    """답글을 작성 중인 노드가 없음"""

    @property
    def node_id(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class Composing:
    """node_id 댓글에 답글을 작성 중"""
    node_id: str
    draft: str = ""


ReplyState = Union[Idle, Composing]

IDLE = Idle()


def start_reply(state: ReplyState, node_id: str) -> Composing:
    """
    답글 작성 모드로 전환합니다.
    - 같은 노드를 다시 선택하면 작성 중이던 내용을 유지합니다.
    - 다른 노드를 선택하면 기존 작성 상태는 버려지고 빈 초안으로 시작합니다.
    """
    if isinstance(state, Composing) and state.node_id == node_id:
        return state
    return Composing(node_id=node_id)


def update_draft(state: ReplyState, text: str) -> Composing:
    if not isinstance(state, Composing):
        raise ReplyStateError("답글 작성 중이 아닐 때는 초안을 수정할 수 없습니다.")
    return replace(state, draft=text)


def cancel(state: ReplyState) -> Idle:
    """제출 또는 취소 후 항상 Idle 로 돌아갑니다."""
    return IDLE


def is_replying(state: ReplyState, node_id: str) -> bool:
    return isinstance(state, Composing) and state.node_id == node_id
