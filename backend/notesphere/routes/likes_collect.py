"""
此模块定义了笔记/评论点赞与笔记收藏相关的 API 端点。

主要功能包括:
- 点赞 / 取消点赞笔记 (切换)
- 点赞 / 取消点赞评论 (切换)
- 收藏 / 取消收藏笔记 (切换)
- 查询当前用户对笔记的点赞、收藏状态

所有切换操作均在一个事务中同时更新关系记录与相关计数 (笔记点赞数/收藏数、
评论点赞数、笔记作者的获赞与收藏数)。

依赖模型: Like, Collection, Note, Comment
使用 Flask 蓝图: likes_collect_bp (前缀 /api/likesAndCollect)

注意: 如果新增、删除或修改功能，必须在这开头的注释中同步修改，如发现功能与注释描述不同，也可以在确定后修改。
"""
from flask import Blueprint, jsonify, request
from flask_jwt_extended import jwt_required

from notesphere import db, limiter
from notesphere.models import Comment, Note, NoteTarget, CommentTarget
from notesphere.services import interaction_service
from notesphere.utils.auth_utils import current_user_id, load_acting_user
from notesphere.utils.request_utils import get_json_body, parse_id

likes_collect_bp = Blueprint('likes_collect', __name__)


@likes_collect_bp.route('/like', methods=['POST'])
@jwt_required()
@limiter.limit("60 per minute")
def toggle_note_like():
    """点赞或取消点赞笔记"""
    user = load_acting_user(current_user_id())
    note_id = parse_id(get_json_body().get('noteId'), '笔记ID不能为空')

    result = interaction_service.toggle_like(user.id, NoteTarget(note_id))
    note = db.session.get(Note, note_id)
    return jsonify({
        'code': 200,
        'message': '点赞成功' if result.active else '取消点赞成功',
        'data': {
            'isLiked': result.active,
            'likeCount': note.like_count if note else 0,
        }
    })


@likes_collect_bp.route('/comment-like', methods=['POST'])
@jwt_required()
@limiter.limit("60 per minute")
def toggle_comment_like():
    """点赞或取消点赞评论"""
    user = load_acting_user(current_user_id())
    comment_id = parse_id(get_json_body().get('commentId'), '评论ID不能为空')

    result = interaction_service.toggle_like(user.id, CommentTarget(comment_id))
    comment = db.session.get(Comment, comment_id)
    return jsonify({
        'code': 200,
        'message': '点赞成功' if result.active else '取消点赞成功',
        'data': {
            'isLiked': result.active,
            'likeCount': comment.like_count if comment else 0,
        }
    })


@likes_collect_bp.route('/collect', methods=['POST'])
@jwt_required()
@limiter.limit("60 per minute")
def toggle_note_collection():
    """收藏或取消收藏笔记"""
    user = load_acting_user(current_user_id())
    note_id = parse_id(get_json_body().get('noteId'), '笔记ID不能为空')

    result = interaction_service.toggle_collection(user.id, note_id)
    note = db.session.get(Note, note_id)
    return jsonify({
        'code': 200,
        'message': '收藏成功' if result.active else '取消收藏成功',
        'data': {
            'isCollected': result.active,
            'collectCount': note.collect_count if note else 0,
        }
    })


@likes_collect_bp.route('/check', methods=['GET'])
@jwt_required()
def check_interaction_status():
    note_id = parse_id(request.args.get('noteId'), '笔记ID不能为空')
    status = interaction_service.interaction_status(current_user_id(), note_id)
    return jsonify({
        'code': 200,
        'message': '获取成功',
        'data': status
    })
