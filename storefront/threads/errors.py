# storefront/threads/errors.py
from typing import Optional


class CommentThreadError(Exception):
    """댓글 스레드 엔진에서 발생하는 모든 예외의 기반 클래스."""


class CommentValidationError(CommentThreadError):
    """
    요청을 보내기 전에 거부된 입력 오류.
    (빈 내용, 로그인하지 않은 사용자, 존재하지 않는 부모 댓글 등)
    재시도 대상이 아니며 입력 영역에 바로 표시됩니다.
    """


class SubmissionInProgress(CommentValidationError):
    """같은 대상에 대한 요청이 이미 처리 중일 때 발생합니다."""


class RequestFailure(CommentThreadError):
    """네트워크 또는 서버 오류. 닫을 수 있는 알림으로 표시됩니다."""

    def __init__(self, message: str, status_code: Optional[int] = None, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code


class ReplyStateError(CommentThreadError):
    """답글 작성 상태 전이가 허용되지 않을 때 발생합니다."""
