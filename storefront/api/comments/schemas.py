# storefront/api/comments/schemas.py
from marshmallow import Schema, fields, validate, validates, pre_load, ValidationError

COMMENT_MAX_LENGTH = 1000


class AuthorSchema(Schema):
    """댓글 응답에 포함될 작성자 정보 스키마. 관리자 답글은 user_id 가 없습니다."""
    user_id = fields.Str(allow_none=True)
    nickname = fields.Str(allow_none=True)
    profile_image_url = fields.Str(allow_none=True)
    is_admin = fields.Bool(dump_default=False)


class CommentContentMixin:
    """댓글 본문은 앞뒤 공백을 제거한 뒤 1~1000자여야 합니다."""

    @pre_load
    def strip_content(self, data, **kwargs):
        if isinstance(data, dict) and isinstance(data.get('content'), str):
            data = dict(data, content=data['content'].strip())
        return data

    @validates('content')
    def validate_content(self, value, **kwargs):
        if not value:
            raise ValidationError("댓글 내용을 입력해주세요.")


class CommentCreateSchema(CommentContentMixin, Schema):
    """
    POST /api/comments/create
    댓글/답글 생성을 요청할 때의 데이터 형식을 정의하고 유효성을 검사합니다.
    """
    product_id = fields.Str(required=True, validate=validate.Length(min=1))
    content = fields.Str(required=True, validate=validate.Length(max=COMMENT_MAX_LENGTH, error="댓글은 1~1000자 사이여야 합니다."))
    parent_id = fields.Str(allow_none=True, load_default=None)
    images = fields.List(fields.Str(), load_default=list)
    client_token = fields.Str(allow_none=True, load_default=None, validate=validate.Length(max=128))


class AdminReplySchema(CommentContentMixin, Schema):
    """POST /api/admin/comments/{comment_id}/reply"""
    content = fields.Str(required=True, validate=validate.Length(max=COMMENT_MAX_LENGTH, error="댓글은 1~1000자 사이여야 합니다."))


class CommentVisibilitySchema(Schema):
    """PATCH /api/admin/comments/{comment_id}/visibility"""
    is_hidden = fields.Bool(required=True)


class CommentListQuerySchema(Schema):
    """GET 목록 조회 쿼리 파라미터"""
    page = fields.Int(load_default=1, validate=validate.Range(min=1))
    limit = fields.Int(load_default=None, validate=validate.Range(min=1))


class CommentResponseSchema(Schema):
    """
    댓글 정보 응답을 위한 최종 JSON 형식을 정의합니다.
    """
    comment_id = fields.Str(required=True)
    product_id = fields.Str(required=True)
    parent_id = fields.Str(allow_none=True)
    author = fields.Nested(AuthorSchema, required=True)
    content = fields.Str(required=True)
    images = fields.List(fields.Str(), dump_default=list)
    liked_by = fields.List(fields.Str(), dump_default=list)
    is_hidden = fields.Bool(dump_default=False)
    created_at = fields.DateTime(required=True)
    updated_at = fields.DateTime(allow_none=True)

    # 서비스 로직에서 채워주는 응답 전용 필드
    like_count = fields.Int(dump_only=True, dump_default=0)
    is_liked = fields.Bool(dump_only=True, dump_default=False)


class PaginationSchema(Schema):
    current_page = fields.Int(required=True)
    total_pages = fields.Int(required=True)
    total_comments = fields.Int(required=True)
    per_page = fields.Int(required=True)


class LikeStateSchema(Schema):
    """PUT /api/comments/{comment_id}/like 응답"""
    comment_id = fields.Str(required=True)
    liked = fields.Bool(required=True)
    liked_by = fields.List(fields.Str(), required=True)
    like_count = fields.Int(required=True)
