# storefront/threads/test_tree_builder.py
"""
댓글 트리 빌더 테스트

사용법: python -m pytest storefront/threads/test_tree_builder.py -v
"""

from datetime import datetime, timedelta, timezone

from storefront.threads.models import AuthorRef, CommentRecord
from storefront.threads.tree_builder import build_forest, flatten_forest, count_nodes, find_node

BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_comment(comment_id, parent_id=None, minute=0, product_id="p1"):
    return CommentRecord(
        comment_id=str(comment_id),
        product_id=product_id,
        author=AuthorRef(user_id="u1"),
        content=f"댓글 {comment_id}",
        created_at=BASE + timedelta(minutes=minute),
        parent_id=None if parent_id is None else str(parent_id),
    )


def ids(nodes):
    return [node.comment_id for node in nodes]


def test_basic_scenario_newest_root_first():
    """[1(T1), 2->1(T2), 3(T3)] -> [3, 1 -> [2]]"""
    comments = [make_comment(1, minute=1), make_comment(2, parent_id=1, minute=2), make_comment(3, minute=3)]

    forest = build_forest(comments)

    assert ids(forest) == ["3", "1"]
    assert ids(forest[1].children) == ["2"]
    assert forest[0].children == ()


def test_orphan_reply_becomes_root():
    comments = [make_comment(1, minute=1), make_comment("x", parent_id="ghost", minute=5)]

    forest = build_forest(comments)

    assert ids(forest) == ["x", "1"]


def test_children_oldest_first_at_every_level():
    comments = [
        make_comment("root", minute=0),
        make_comment("b", parent_id="root", minute=20),
        make_comment("a", parent_id="root", minute=10),
        make_comment("a2", parent_id="a", minute=40),
        make_comment("a1", parent_id="a", minute=30),
    ]

    forest = build_forest(comments)

    root = forest[0]
    assert ids(root.children) == ["a", "b"]
    assert ids(root.children[0].children) == ["a1", "a2"]


def test_every_comment_appears_exactly_once():
    comments = [make_comment(i, parent_id=(i // 2 if i % 3 else None), minute=i) for i in range(1, 40)]
    comments.append(make_comment("lost", parent_id="deleted", minute=7))

    forest = build_forest(comments)
    seen = [row.node.comment_id for row in flatten_forest(forest)]

    assert len(seen) == len(comments)
    assert sorted(seen) == sorted(c.comment_id for c in comments)
    assert count_nodes(forest) == len(comments)


def test_input_order_does_not_change_output():
    comments = [make_comment(i, parent_id=(1 if i > 3 else None), minute=i % 4) for i in range(1, 10)]

    assert build_forest(comments) == build_forest(list(reversed(comments)))


def test_same_timestamp_is_ordered_by_id():
    comments = [
        make_comment("b", minute=1), make_comment("a", minute=1),
        make_comment("r2", parent_id="a", minute=5), make_comment("r1", parent_id="a", minute=5),
    ]

    forest = build_forest(comments)

    assert ids(forest) == ["b", "a"]
    assert ids(forest[1].children) == ["r1", "r2"]


def test_naive_and_aware_timestamps_sort_together():
    naive = CommentRecord(
        comment_id="naive", product_id="p1", author=AuthorRef(user_id="u1"),
        content="naive", created_at=datetime(2024, 1, 1, 0, 30),
    )
    comments = [naive, make_comment("aware", minute=10)]

    forest = build_forest(comments)

    assert ids(forest) == ["naive", "aware"]
    assert naive.created_at.tzinfo == timezone.utc


def test_empty_input():
    assert build_forest([]) == ()
    assert flatten_forest(()) == []


def test_duplicate_ids_collapse_to_one_node():
    comments = [make_comment(1, minute=1), make_comment(1, minute=1)]

    assert count_nodes(build_forest(comments)) == 1


def test_cycles_are_promoted_to_roots():
    comments = [
        make_comment("a", parent_id="b", minute=1),
        make_comment("b", parent_id="a", minute=2),
        make_comment("self", parent_id="self", minute=3),
    ]

    forest = build_forest(comments)

    assert ids(forest) == ["self", "a"]
    assert ids(forest[1].children) == ["b"]
    assert count_nodes(forest) == 3


def test_deep_chain_is_built_without_recursion():
    depth = 3000
    comments = [make_comment(0, minute=0)]
    comments += [make_comment(i, parent_id=i - 1, minute=i) for i in range(1, depth)]

    forest = build_forest(comments)

    assert len(forest) == 1
    assert forest[0].reply_count == depth - 1


def test_flatten_clamps_indent_but_keeps_depth():
    comments = [make_comment(0)] + [make_comment(i, parent_id=i - 1, minute=i) for i in range(1, 6)]

    rows = flatten_forest(build_forest(comments))

    assert [row.depth for row in rows] == [0, 1, 2, 3, 4, 5]
    assert [row.indent for row in rows] == [0, 1, 2, 3, 3, 3]


def test_flatten_skips_children_of_collapsed_nodes():
    comments = [
        make_comment(1, minute=1), make_comment(2, parent_id=1, minute=2),
        make_comment(3, minute=3), make_comment(4, parent_id=3, minute=4),
    ]
    forest = build_forest(comments)

    rows = flatten_forest(forest, is_expanded=lambda cid: cid == "1")

    assert [row.node.comment_id for row in rows] == ["3", "1", "2"]


def test_find_node():
    forest = build_forest([make_comment(1), make_comment(2, parent_id=1, minute=1)])

    assert find_node(forest, "2").comment.parent_id == "1"
    assert find_node(forest, "missing") is None
