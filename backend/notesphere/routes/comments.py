"""
此模块定义了笔记评论相关的 API 端点。

主要功能包括:
- 分页获取笔记下已发布的评论 (附被回复评论摘要)
- 发表评论或回复评论 (层级与根评论自动计算)
- 修改评论状态 (待审核 / 已发布 / 已删除)
- 物理删除评论

笔记的评论数只统计已发布的评论，状态迁移与删除时同步调整。

依赖模型: Comment, Note, User
使用 Flask 蓝图: comments_bp (前缀 /api/comments)

注意: 如果新增、删除或修改功能，必须在这开头的注释中同步修改，如发现功能与注释描述不同，也可以在确定后修改。
"""
from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from notesphere import limiter
from notesphere.services import comment_service
from notesphere.utils.auth_utils import current_user_id, load_acting_user
from notesphere.utils.errors import ValidationError
from notesphere.utils.request_utils import get_json_body, get_pagination, parse_id

comments_bp = Blueprint('comments', __name__)


@comments_bp.route('', methods=['GET'])
def list_comments():
    note_id = parse_id(request.args.get('noteId'), '笔记ID不能为空')
    page, page_size = get_pagination()
    comments, pagination = comment_service.list_published_comments(note_id, page, page_size)
    return jsonify({
        'code': 200,
        'message': '获取评论成功',
        'data': {'comments': comments, 'pagination': pagination}
    })


@comments_bp.route('/create', methods=['POST'])
@jwt_required()
@limiter.limit("30 per minute")
def create_comment():
    """
    发表评论。

    请求体:
        noteId: 笔记ID (必填)
        content: 评论内容 (必填)
        replyToId: 被回复的评论ID (可选)
        imageUrl: 评论图片 (可选)
    """
    user = load_acting_user(current_user_id())
    data = get_json_body()
    note_id = parse_id(data.get('noteId'), '笔记ID不能为空')
    reply_to_id = parse_id(data.get('replyToId'), '回复的评论ID无效', required=False)

    comment = comment_service.create_comment(
        user.id,
        note_id,
        data.get('content'),
        reply_to_id=reply_to_id,
        image_url=data.get('imageUrl'),
    )
    return jsonify({
        'code': 201,
        'message': '评论成功',
        'data': {'comment': comment.to_dict()}
    }), 201


@comments_bp.route('/<int:comment_id>/status', methods=['PUT'])
@jwt_required()
def update_comment_status(comment_id):
    user = load_acting_user(current_user_id())
    status = get_json_body().get('status')
    if isinstance(status, bool) or not isinstance(status, int):
        raise ValidationError('状态值无效')

    comment = comment_service.change_comment_status(user.id, comment_id, status)
    return jsonify({
        'code': 200,
        'message': '评论状态已更新',
        'data': {'comment': comment.to_dict()}
    })


@comments_bp.route('/<int:comment_id>', methods=['DELETE'])
@jwt_required()
def delete_comment(comment_id):
    user = load_acting_user(current_user_id())
    comment_service.destroy_comment(user.id, comment_id)
    return jsonify({
        'code': 200,
        'message': '评论已删除',
        'data': None
    })
