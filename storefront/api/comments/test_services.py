# storefront/api/comments/test_services.py
"""
CommentService 테스트 (Firestore 클라이언트 모킹)

사용법: python -m pytest storefront/api/comments/test_services.py -v
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from storefront.api.comments.services import CommentService, InvalidParentError
from storefront.models.notification import NotificationType

CREATED = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)


def snapshot(data=None):
    doc = MagicMock()
    doc.exists = data is not None
    doc.to_dict.return_value = dict(data) if data is not None else None
    return doc


class FakeCollection:
    """document(id) 마다 같은 참조를 돌려주는 컬렉션 모킹"""

    def __init__(self, docs=None):
        self.refs = {}
        for doc_id, data in (docs or {}).items():
            self.ref(doc_id).get.return_value = snapshot(data)

    def ref(self, doc_id):
        if doc_id not in self.refs:
            ref = MagicMock(name=f"doc:{doc_id}")
            ref.get.return_value = snapshot(None)
            self.refs[doc_id] = ref
        return self.refs[doc_id]

    def document(self, doc_id):
        return self.ref(doc_id)


def comment_data(comment_id, product_id="p1", author_id="owner", liked_by=None, parent_id=None):
    return {
        'comment_id': comment_id,
        'product_id': product_id,
        'author': {'user_id': author_id, 'nickname': '작성자', 'profile_image_url': None, 'is_admin': False},
        'content': '원 댓글 내용',
        'parent_id': parent_id,
        'images': [],
        'liked_by': liked_by or [],
        'is_hidden': False,
        'client_token': None,
        'created_at': CREATED,
        'updated_at': CREATED,
    }


@pytest.fixture(autouse=True)
def plain_transactions():
    with patch('storefront.api.comments.services.firestore.transactional', lambda func: func):
        yield


@pytest.fixture
def comments():
    return FakeCollection({
        'c1': comment_data('c1'),
        'other': comment_data('other', product_id='p2'),
    })


@pytest.fixture
def users():
    return FakeCollection({
        'me': {'nickname': '나', 'profile_image_url': 'http://img/me.png'},
        'owner': {'nickname': '작성자'},
    })


@pytest.fixture
def db(comments, users):
    db = MagicMock()
    db.collection.side_effect = lambda name: {'comments': comments, 'users': users}[name]
    return db


@pytest.fixture
def notifications():
    return MagicMock()


@pytest.fixture
def service(db, notifications):
    return CommentService(db=db, notification_service=notifications)


def test_create_comment_stores_author_snapshot(service, db):
    result = service.create_comment("p1", "me", "  새 댓글  ")

    transaction = db.transaction.return_value
    stored = transaction.set.call_args[0][1]
    assert stored['content'] == "새 댓글"
    assert stored['author']['nickname'] == "나"
    assert stored['is_hidden'] is False
    assert result['like_count'] == 0
    assert result['is_liked'] is False


def test_reply_notifies_parent_author(service, notifications):
    result = service.create_comment("p1", "me", "답글입니다", parent_id="c1")

    assert result['parent_id'] == "c1"
    kwargs = notifications.create_notification.call_args.kwargs
    assert kwargs['recipient_id'] == "owner"
    assert kwargs['n_type'] == NotificationType.COMMENT_REPLY
    assert kwargs['link'] == "/products/p1"


def test_reply_to_missing_parent_is_rejected(service, db):
    with pytest.raises(ValueError):
        service.create_comment("p1", "me", "답글", parent_id="ghost")
    db.transaction.return_value.set.assert_not_called()


def test_reply_to_other_products_comment_is_rejected(service, db):
    with pytest.raises(InvalidParentError):
        service.create_comment("p1", "me", "답글", parent_id="other")
    db.transaction.return_value.set.assert_not_called()


def test_unknown_author_is_rejected(service):
    with pytest.raises(ValueError):
        service.create_comment("p1", "nobody", "내용")


def test_same_client_token_maps_to_same_document(service, comments, db, notifications):
    first = service.create_comment("p1", "me", "한 번만", parent_id="c1", client_token="tok-1")
    stored = db.transaction.return_value.set.call_args[0][1]
    comments.ref(first['comment_id']).get.return_value = snapshot(stored)

    second = service.create_comment("p1", "me", "한 번만", parent_id="c1", client_token="tok-1")

    assert second['comment_id'] == first['comment_id']
    assert db.transaction.return_value.set.call_count == 1
    assert notifications.create_notification.call_count == 1


def test_different_users_with_same_token_get_different_ids():
    assert CommentService._comment_id_for("a", "tok") != CommentService._comment_id_for("b", "tok")


def test_admin_reply_uses_admin_author(service, db, notifications):
    result = service.create_admin_reply("c1", "관리자 답변입니다")

    assert result['author']['is_admin'] is True
    assert result['author']['user_id'] is None
    assert result['product_id'] == "p1"
    assert notifications.create_notification.call_args.kwargs['n_type'] == NotificationType.ADMIN_REPLY


def test_toggle_like_adds_then_removes(service, comments, db, notifications):
    liked = service.toggle_like("c1", "me")

    assert liked == {'comment_id': 'c1', 'liked': True, 'liked_by': ['me'], 'like_count': 1}
    db.transaction.return_value.update.assert_called_with(comments.ref('c1'), {'liked_by': ['me']})
    assert notifications.create_notification.call_args.kwargs['n_type'] == NotificationType.COMMENT_LIKE

    comments.ref('c1').get.return_value = snapshot(comment_data('c1', liked_by=['me']))
    notifications.reset_mock()

    unliked = service.toggle_like("c1", "me")

    assert unliked['liked'] is False
    assert unliked['like_count'] == 0
    notifications.create_notification.assert_not_called()


def test_toggle_like_removes_duplicate_entries(service, comments):
    comments.ref('c1').get.return_value = snapshot(comment_data('c1', liked_by=['me', 'me', 'u2']))

    result = service.toggle_like("c1", "me")

    assert result['liked_by'] == ['u2']


def test_toggle_like_on_missing_comment(service):
    with pytest.raises(ValueError):
        service.toggle_like("ghost", "me")


def test_delete_requires_author(service, comments):
    with pytest.raises(PermissionError):
        service.delete_comment("c1", "me")
    comments.ref('c1').delete.assert_not_called()

    service.delete_comment("c1", "owner")
    comments.ref('c1').delete.assert_called_once()


def test_delete_missing_comment(service):
    with pytest.raises(ValueError):
        service.delete_comment("ghost", "me")


def test_set_hidden_updates_flag(service, comments):
    result = service.set_hidden("c1", True)

    update = comments.ref('c1').update.call_args[0][0]
    assert update['is_hidden'] is True
    assert result['is_hidden'] is True


def test_get_product_comments_paginates(service, comments):
    query = MagicMock()
    comments.where = MagicMock(return_value=query)
    query.where.return_value = query
    query.count.return_value.get.return_value = [[MagicMock(value=21)]]
    ordered = query.order_by.return_value
    ordered.offset.return_value.limit.return_value.stream.return_value = [
        snapshot(comment_data('c1', liked_by=['me'])),
    ]

    items, pagination = service.get_product_comments("p1", page=2, limit=10, current_user_id="me")

    ordered.offset.assert_called_once_with(10)
    query.where.assert_called_once_with('is_hidden', '==', False)
    assert pagination == {'current_page': 2, 'total_pages': 3, 'total_comments': 21, 'per_page': 10}
    assert items[0]['is_liked'] is True
    assert items[0]['like_count'] == 1
