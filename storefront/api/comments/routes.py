# storefront/api/comments/routes.py
import logging
from flask import Blueprint, request, jsonify, Response, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity
from marshmallow import ValidationError, EXCLUDE

from storefront.api.comments.schemas import (
    CommentCreateSchema, CommentListQuerySchema, CommentResponseSchema,
    PaginationSchema, LikeStateSchema,
)
from storefront.api.comments.services import InvalidParentError


comments_bp = Blueprint('comments_bp', __name__)


def parse_page_args():
    """page/limit 쿼리 파라미터를 검증하고 설정된 최대 페이지 크기로 제한합니다."""
    args = CommentListQuerySchema(unknown=EXCLUDE).load(request.args)
    limit = args['limit'] or current_app.config['COMMENTS_PAGE_SIZE']
    return args['page'], min(limit, current_app.config['COMMENTS_MAX_PAGE_SIZE'])


def comment_list_response(comments, pagination):
    return jsonify({
        "success": True,
        "comments": CommentResponseSchema(many=True).dump(comments),
        "pagination": PaginationSchema().dump(pagination),
    }), 200


@comments_bp.route('/product/<string:product_id>', methods=['GET'])
@jwt_required(optional=True)
def get_product_comments(product_id: str):
    """
    특정 상품의 댓글 목록을 최신순으로 페이지네이션하여 조회합니다.
    - 숨김 처리된 댓글은 제외됩니다.
    - 로그인한 경우 각 댓글에 is_liked 가 채워집니다.
    """
    comment_service = current_app.services['comments']
    user_id = get_jwt_identity()
    try:
        page, limit = parse_page_args()
        comments, pagination = comment_service.get_product_comments(product_id, page, limit, current_user_id=user_id)
        return comment_list_response(comments, pagination)
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except Exception as e:
        logging.error(f"댓글 목록 조회 중 오류 발생 (product_id: {product_id}): {e}", exc_info=True)
        return jsonify({"error_code": "INTERNAL_SERVER_ERROR", "message": "댓글 목록 조회 중 오류가 발생했습니다."}), 500


@comments_bp.route('/create', methods=['POST'])
@jwt_required()
def create_comment():
    """
    상품에 새 댓글 또는 답글(parent_id)을 작성합니다.
    - 성공 시, 생성된 댓글 정보를 201 Created 상태 코드와 함께 반환합니다.
    - 같은 client_token 으로 다시 요청하면 새로 만들지 않고 기존 댓글을 반환합니다.
    """
    comment_service = current_app.services['comments']
    user_id = get_jwt_identity()
    try:
        data = CommentCreateSchema().load(request.get_json(silent=True) or {})
        new_comment = comment_service.create_comment(
            product_id=data['product_id'],
            author_id=user_id,
            content=data['content'],
            parent_id=data['parent_id'],
            images=data['images'],
            client_token=data['client_token'],
        )
        return jsonify({"success": True, "comment": CommentResponseSchema().dump(new_comment)}), 201
    except ValidationError as err:
        return jsonify({"error_code": "VALIDATION_ERROR", "details": err.messages}), 400
    except InvalidParentError as e:
        return jsonify({"error_code": "INVALID_PARENT", "message": str(e)}), 400
    except ValueError as e: # 부모 댓글이나 작성자 정보가 없는 경우
        return jsonify({"error_code": "RESOURCE_NOT_FOUND", "message": str(e)}), 404
    except Exception as e:
        logging.error(f"댓글 생성 중 오류 발생 (user_id: {user_id}): {e}", exc_info=True)
        return jsonify({"error_code": "COMMENT_CREATION_FAILED", "message": "댓글 생성 중 오류가 발생했습니다."}), 500


@comments_bp.route('/<string:comment_id>/like', methods=['PUT'])
@jwt_required()
def toggle_comment_like(comment_id: str):
    """
    특정 댓글의 좋아요를 누르거나 취소하고, 확정된 좋아요 상태를 반환합니다.
    """
    comment_service = current_app.services['comments']
    user_id = get_jwt_identity()
    try:
        like_state = comment_service.toggle_like(comment_id, user_id)
        return jsonify(dict(LikeStateSchema().dump(like_state), success=True)), 200
    except ValueError as e:
        return jsonify({"error_code": "COMMENT_NOT_FOUND", "message": str(e)}), 404
    except Exception as e:
        logging.error(f"댓글 좋아요 토글 실패 (comment_id: {comment_id}): {e}", exc_info=True)
        return jsonify({"error_code": "LIKE_TOGGLE_FAILED", "message": "좋아요 처리 중 오류가 발생했습니다."}), 500


@comments_bp.route('/<string:comment_id>', methods=['DELETE'])
@jwt_required()
def delete_comment(comment_id: str):
    """
    특정 댓글을 삭제합니다. (작성자 본인만 가능)
    """
    comment_service = current_app.services['comments']
    user_id = get_jwt_identity()
    try:
        comment_service.delete_comment(comment_id, user_id)
        return Response(status=204)
    except PermissionError as e:
        return jsonify({"error_code": "FORBIDDEN", "message": str(e)}), 403
    except ValueError as e:
        return jsonify({"error_code": "NOT_FOUND", "message": str(e)}), 404
    except Exception as e:
        logging.error(f"댓글 삭제 실패 (comment_id: {comment_id}): {e}", exc_info=True)
        return jsonify({"error_code": "COMMENT_DELETE_FAILED", "message": "댓글 삭제 중 오류가 발생했습니다."}), 500
