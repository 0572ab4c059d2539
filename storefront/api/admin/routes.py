# storefront/api/admin/routes.py
import logging
from flask import Blueprint, request, jsonify, current_app
from marshmallow import ValidationError

from storefront.api.comments.routes import parse_page_args, comment_list_response
from storefront.api.comments.schemas import AdminReplySchema, CommentVisibilitySchema, CommentResponseSchema
from storefront.core.security import admin_required

logger = logging.getLogger(__name__)

admin_comments_bp = Blueprint('admin_comments_bp', __name__)


@admin_comments_bp.route('/product/<string:product_id>', methods=['GET'])
@admin_required
def get_product_comments_for_admin(product_id: str):
    """숨김 처리된 댓글까지 포함하여 상품 댓글 목록을 조회합니다."""
    comment_service = current_app.services['comments']
    try:
        page, limit = parse_page_args()
        comments, pagination = comment_service.get_product_comments(product_id, page, limit, include_hidden=True)
        return comment_list_response(comments, pagination)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logger.error(f"관리자 댓글 목록 조회 실패 (product_id: {product_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "댓글 목록 조회 중 오류가 발생했습니다."}), 500


@admin_comments_bp.route('/<string:comment_id>/reply', methods=['POST'])
@admin_required
def reply_as_admin(comment_id: str):
    """
    관리자 이름으로 답글을 작성합니다.
    - 답글 작성자는 관리자 표식으로 저장되며, 원 댓글 작성자에게 알림이 생성됩니다.
    """
    comment_service = current_app.services['comments']
    try:
        data = AdminReplySchema().load(request.get_json(silent=True) or {})
        reply = comment_service.create_admin_reply(comment_id, data['content'])
        logger.info(f"관리자 답글 작성 완료 (parent_id: {comment_id})")
        return jsonify({"success": True, "comment": CommentResponseSchema().dump(reply)}), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "COMMENT_NOT_FOUND", "message": str(e)}), 404
    except Exception as e:
        logger.error(f"관리자 답글 작성 실패 (comment_id: {comment_id}): {e}", exc_info=True)
        return jsonify({"error_code": "COMMENT_CREATION_FAILED", "message": "답글 작성 중 오류가 발생했습니다."}), 500


@admin_comments_bp.route('/<string:comment_id>/visibility', methods=['PATCH'])
@admin_required
def set_comment_visibility(comment_id: str):
    """댓글을 숨기거나 다시 노출합니다. 숨긴 댓글의 답글은 목록에서 루트로 표시됩니다."""
    comment_service = current_app.services['comments']
    try:
        data = CommentVisibilitySchema().load(request.get_json(silent=True) or {})
        comment = comment_service.set_hidden(comment_id, data['is_hidden'])
        return jsonify({"success": True, "comment": CommentResponseSchema().dump(comment)}), 200
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except ValueError as e:
        return jsonify({"error_code": "COMMENT_NOT_FOUND", "message": str(e)}), 404
    except Exception as e:
        logger.error(f"댓글 숨김 처리 실패 (comment_id: {comment_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "댓글 상태 변경 중 오류가 발생했습니다."}), 500
