# safespace/community/routes.py
from flask import Blueprint, request, jsonify, current_app
from sqlalchemy.exc import SQLAlchemyError
from safespace.init_db import db
from safespace.errors import DependencyError
from safespace.community.views import create_post, list_posts, create_comment, list_comments


community_bp = Blueprint('community', __name__)


@community_bp.route('/create-post', methods=['POST'])
def add_post():
    data = request.get_json(silent=True) or {}
    user_id = data.get('userId')
    content = data.get('content')

    try:
        post = create_post(user_id, content)
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Database error: {str(e)}")
        raise DependencyError('Failed to create post')

    return jsonify({
        'success': True,
        'message': 'Post created successfully',
        'postId': post.post_id,
        'post': post.to_dict(),
    }), 201

@community_bp.route('/get-posts', methods=['GET'])
def get_posts():
    try:
        posts = list_posts()
    except SQLAlchemyError as e:
        current_app.logger.error(f"Error fetching posts: {str(e)}")
        return jsonify({'message': 'Failed to fetch posts'}), 500

    return jsonify({'posts': posts}), 200

@community_bp.route('/create-comment', methods=['POST'])
def add_comment():
    data = request.get_json(silent=True) or {}
    post_id = data.get('postId')
    user_id = data.get('userId')
    content = data.get('comment')

    try:
        comment = create_comment(post_id, user_id, content)
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f"Error creating comment: {str(e)}")
        raise DependencyError('Error creating comment')

    return jsonify({
        'message': 'Comment posted successfully',
        'comment': {
            'id': comment.id,
            'postId': comment.post_id,
            'userId': comment.user_id,
            'content': comment.content,
            'createdAt': comment.created_at.isoformat(),
        },
    }), 201

@community_bp.route('/get-comments/<post_id>', methods=['GET'])
def get_comments(post_id):
    try:
        comments = list_comments(post_id)
    except SQLAlchemyError as e:
        current_app.logger.error(f"Error fetching comments: {str(e)}")
        return jsonify({'message': 'Error fetching comments'}), 500

    return jsonify({'comments': comments}), 200
