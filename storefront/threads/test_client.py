# storefront/threads/test_client.py
"""
댓글 API 클라이언트 테스트 (requests.Session 모킹)

사용법: python -m pytest storefront/threads/test_client.py -v
"""

from unittest.mock import MagicMock

import pytest
import requests

from storefront.threads.client import CommentApiClient
from storefront.threads.errors import CommentValidationError, RequestFailure

COMMENT_JSON = {
    'comment_id': 'c1',
    'product_id': 'p1',
    'author': {'user_id': 'u1', 'nickname': '멍멍이', 'profile_image_url': None, 'is_admin': False},
    'content': '좋은 상품이네요',
    'parent_id': None,
    'liked_by': ['u2'],
    'images': [],
    'created_at': '2024-01-15T10:30:00Z',
}


def make_response(status_code=200, body=None):
    response = MagicMock()
    response.status_code = status_code
    if body is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def client(session):
    return CommentApiClient("http://shop.test/", access_token="token-123", session=session)


def test_fetch_comments_parses_page(client, session):
    session.request.return_value = make_response(200, {
        'comments': [COMMENT_JSON],
        'pagination': {'current_page': 2, 'total_pages': 3, 'total_comments': 21, 'per_page': 10},
    })

    page = client.fetch_comments("p1", page=2, page_size=10)

    args, kwargs = session.request.call_args
    assert args == ('GET', "http://shop.test/api/comments/product/p1")
    assert kwargs['params'] == {'page': 2, 'limit': 10}
    assert kwargs['headers']['Authorization'] == "Bearer token-123"
    assert page.comments[0].comment_id == 'c1'
    assert page.comments[0].like_count == 1
    assert page.pagination.total_pages == 3


def test_create_comment_sends_parent_and_token(client, session):
    session.request.return_value = make_response(201, {'success': True, 'comment': dict(COMMENT_JSON, parent_id='c0')})

    comment = client.create_comment("p1", "답글", parent_id="c0", client_token="abc")

    args, kwargs = session.request.call_args
    assert args[0] == 'POST'
    assert kwargs['json'] == {'product_id': 'p1', 'content': '답글', 'parent_id': 'c0', 'client_token': 'abc'}
    assert comment.parent_id == 'c0'


def test_toggle_like_returns_server_state(client, session):
    session.request.return_value = make_response(200, {
        'success': True, 'comment_id': 'c1', 'liked': True, 'liked_by': ['u1', 'u2'], 'like_count': 2,
    })

    state = client.toggle_like("c1")

    assert session.request.call_args[0] == ('PUT', "http://shop.test/api/comments/c1/like")
    assert state.liked is True
    assert state.like_count == 2


def test_delete_accepts_no_content(client, session):
    session.request.return_value = make_response(204)

    assert client.delete_comment("c1") is None


def test_validation_error_response(client, session):
    session.request.return_value = make_response(400, {
        'error_code': 'VALIDATION_ERROR', 'message': '입력값이 올바르지 않습니다.', 'details': {'content': ['x']},
    })

    with pytest.raises(CommentValidationError):
        client.create_comment("p1", "x")


def test_server_error_becomes_request_failure(client, session):
    session.request.return_value = make_response(500, {'error_code': 'COMMENT_CREATION_FAILED', 'message': '실패'})

    with pytest.raises(RequestFailure) as exc_info:
        client.create_comment("p1", "x")

    assert exc_info.value.status_code == 500
    assert exc_info.value.error_code == 'COMMENT_CREATION_FAILED'


def test_connection_error_becomes_request_failure(client, session):
    session.request.side_effect = requests.ConnectionError("down")

    with pytest.raises(RequestFailure) as exc_info:
        client.fetch_comments("p1")

    assert exc_info.value.status_code is None


def test_anonymous_client_sends_no_authorization(session):
    session.request.return_value = make_response(200, {'comments': [], 'pagination': None})
    client = CommentApiClient("http://shop.test", session=session)

    page = client.fetch_comments("p1")

    assert 'Authorization' not in session.request.call_args[1]['headers']
    assert page.comments == ()
    assert page.pagination is None
