# storefront/threads/client.py
import logging
from typing import Any, Dict, Optional

import requests

from storefront.threads.errors import CommentValidationError, RequestFailure
from storefront.threads.models import CommentRecord, Pagination
from storefront.threads.store import CommentPage, LikeState

logger = logging.getLogger(__name__)


class CommentApiClient:
    """
    댓글 REST API(/api/comments)를 호출하는 CommentStore 구현체.
    - 전송 오류와 2xx 이외의 응답은 RequestFailure 로 변환합니다.
    - 서버의 VALIDATION_ERROR 응답은 CommentValidationError 로 변환합니다.
    """

    def __init__(self, base_url: str, access_token: Optional[str] = None,
                 session: Optional[requests.Session] = None, timeout: float = 10.0):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout
        self.access_token = access_token

    def set_access_token(self, access_token: Optional[str]) -> None:
        self.access_token = access_token

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        headers = kwargs.pop('headers', {})
        if self.access_token:
            headers['Authorization'] = f"Bearer {self.access_token}"
        url = f"{self.base_url}{path}"

        try:
            response = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning(f"댓글 API 요청 실패 ({method} {path}): {e}")
            raise RequestFailure("서버에 연결할 수 없습니다.") from e

        if response.status_code == 204:
            return {}

        try:
            body = response.json()
        except ValueError:
            body = {}

        if not 200 <= response.status_code < 300:
            error_code = body.get('error_code')
            if response.status_code == 400 and error_code == 'VALIDATION_ERROR':
                raise CommentValidationError(body.get('message') or f"입력값이 올바르지 않습니다: {body.get('details')}")
            message = body.get('message') or body.get('msg') or f"요청이 실패했습니다. (HTTP {response.status_code})"
            raise RequestFailure(message, status_code=response.status_code, error_code=error_code)
        return body

    def fetch_comments(self, product_id: str, page: int = 1, page_size: int = 10) -> CommentPage:
        body = self._request('GET', f"/api/comments/product/{product_id}",
                             params={'page': page, 'limit': page_size})
        comments = tuple(CommentRecord.from_dict(c) for c in body.get('comments', []))
        pagination = Pagination.from_dict(body['pagination']) if body.get('pagination') else None
        return CommentPage(comments=comments, pagination=pagination)

    def create_comment(self, product_id: str, content: str, parent_id: Optional[str] = None,
                       client_token: Optional[str] = None) -> CommentRecord:
        payload = {'product_id': product_id, 'content': content}
        if parent_id is not None:
            payload['parent_id'] = parent_id
        if client_token is not None:
            payload['client_token'] = client_token
        body = self._request('POST', "/api/comments/create", json=payload)
        return CommentRecord.from_dict(body['comment'])

    def toggle_like(self, comment_id: str) -> LikeState:
        body = self._request('PUT', f"/api/comments/{comment_id}/like")
        return LikeState(
            comment_id=body.get('comment_id', comment_id),
            liked=bool(body.get('liked')),
            liked_by=frozenset(body.get('liked_by') or ()),
        )

    def delete_comment(self, comment_id: str) -> None:
        self._request('DELETE', f"/api/comments/{comment_id}")
