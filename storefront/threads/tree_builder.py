# storefront/threads/tree_builder.py
"""
평탄한 댓글 목록을 답글 트리(forest)로 변환하는 순수 함수 모음

정렬 규칙:
- 루트 댓글: created_at 내림차순 (최신 댓글이 위)
- 답글: created_at 오름차순 (대화 순서)
- created_at 이 같으면 comment_id 로 순서를 고정합니다.

부모를 찾을 수 없는 답글(삭제/숨김/다른 페이지)은 버리지 않고 루트로 취급합니다.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from storefront.threads.models import CommentRecord, ThreadNode

logger = logging.getLogger(__name__)

# 들여쓰기 표시용 최대 깊이 (데이터 깊이에는 제한 없음)
MAX_INDENT_DEPTH = 3


@dataclass(frozen=True)
class ThreadRow:
    """화면에 한 줄로 그려질 노드와 깊이 정보"""
    node: ThreadNode
    depth: int
    indent: int


def _sort_key(comment: CommentRecord):
    return (comment.created_at, comment.comment_id)


def build_forest(comments: Iterable[CommentRecord]) -> Tuple[ThreadNode, ...]:
    """
    댓글 목록으로 ThreadNode forest 를 만듭니다.
    id 인덱스로 O(n) 연결 후, 각 레벨을 독립적으로 정렬합니다.
    같은 comment_id 가 여러 번 들어오면 마지막 항목이 사용됩니다.
    """
    index: Dict[str, CommentRecord] = {}
    for comment in comments:
        index[comment.comment_id] = comment

    children: Dict[str, List[CommentRecord]] = defaultdict(list)
    roots: List[CommentRecord] = []
    for comment in index.values():
        parent_id = comment.parent_id
        if parent_id is not None and parent_id != comment.comment_id and parent_id in index:
            children[parent_id].append(comment)
        else:
            if parent_id is not None:
                logger.debug(f"부모 댓글({parent_id})이 없어 루트로 표시합니다: {comment.comment_id}")
            roots.append(comment)

    for siblings in children.values():
        siblings.sort(key=_sort_key)

    reachable = _collect_reachable(roots, children)
    if len(reachable) < len(index):
        # 순환 참조: 입력으로만 가능한 형태. 가장 오래된 댓글부터 루트로 끊어냅니다.
        stranded = sorted((c for c in index.values() if c.comment_id not in reachable), key=_sort_key)
        while stranded:
            head = stranded[0]
            children[head.parent_id].remove(head)
            roots.append(head)
            reachable |= _collect_reachable([head], children)
            stranded = [c for c in stranded if c.comment_id not in reachable]
        logger.warning("순환 참조된 댓글을 루트로 승격했습니다.")

    roots.sort(key=_sort_key, reverse=True)
    return tuple(_freeze(root, children) for root in roots)


def _collect_reachable(starts: Iterable[CommentRecord], children: Dict[str, List[CommentRecord]]) -> Set[str]:
    seen: Set[str] = set()
    stack = list(starts)
    while stack:
        comment = stack.pop()
        if comment.comment_id in seen:
            continue
        seen.add(comment.comment_id)
        stack.extend(children.get(comment.comment_id, ()))
    return seen


def _freeze(root: CommentRecord, children: Dict[str, List[CommentRecord]]) -> ThreadNode:
    """후위 순회로 불변 ThreadNode 를 아래에서부터 조립합니다 (재귀 깊이 제한 없음)."""
    built: Dict[str, ThreadNode] = {}
    stack = [(root, False)]
    while stack:
        comment, ready = stack.pop()
        kids = children.get(comment.comment_id, ())
        if ready:
            built[comment.comment_id] = ThreadNode(
                comment=comment,
                children=tuple(built.pop(kid.comment_id) for kid in kids),
            )
        else:
            stack.append((comment, True))
            stack.extend((kid, False) for kid in kids)
    return built[root.comment_id]


def flatten_forest(
    forest: Iterable[ThreadNode],
    is_expanded: Optional[Callable[[str], bool]] = None,
    max_indent: int = MAX_INDENT_DEPTH,
) -> List[ThreadRow]:
    """
    forest 를 화면 순서(전위 순회)의 평탄한 목록으로 변환합니다.
    is_expanded 가 주어지면 접힌 노드의 답글은 건너뜁니다.
    """
    rows: List[ThreadRow] = []
    stack = [(node, 0) for node in reversed(tuple(forest))]
    while stack:
        node, depth = stack.pop()
        rows.append(ThreadRow(node=node, depth=depth, indent=min(depth, max_indent)))
        if node.children and (is_expanded is None or is_expanded(node.comment_id)):
            stack.extend((child, depth + 1) for child in reversed(node.children))
    return rows


def count_nodes(forest: Iterable[ThreadNode]) -> int:
    return len(flatten_forest(forest))


def find_node(forest: Iterable[ThreadNode], comment_id: str) -> Optional[ThreadNode]:
    for row in flatten_forest(forest):
        if row.node.comment_id == comment_id:
            return row.node
    return None
