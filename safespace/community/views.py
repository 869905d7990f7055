# safespace/community/views.py
from datetime import datetime
from flask import current_app
from safespace.init_db import db
from safespace.authentication.models import User
from safespace.community.models import Post, Comment
from safespace.errors import ValidationError, NotFoundError, Unverified
from safespace.logging_config import setup_logging

logger = setup_logging()


def _to_id(value, field):
    # JSON true would otherwise become id 1
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be an integer.')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be an integer.')

def _resolve_author(user_id):
    user = User.query.filter_by(id=_to_id(user_id, 'userId')).first()
    if not user:
        raise ValidationError('User does not exist.')
    if current_app.config.get('REQUIRE_VERIFIED_AUTHOR') and not user.is_verified:
        raise Unverified()
    return user


def _has_text(content):
    return isinstance(content, str) and bool(content.strip())


def create_post(user_id, content, now=None):
    if not user_id or not _has_text(content):
        raise ValidationError('User ID and content are required')

    author = _resolve_author(user_id)
    post = Post(user_id=author.id, post_content=content, comment_count=0,
                post_created_at=now or datetime.utcnow())
    db.session.add(post)
    db.session.commit()

    logger.info(f"Post {post.post_id} created by user {author.id}.")
    return post


def list_posts():
    """Posts with their author's email, newest first."""
    rows = (db.session.query(Post, User.email)
            .join(User, Post.user_id == User.id)
            .order_by(Post.post_created_at.desc(), Post.post_id.desc())
            .all())

    posts = []
    for post, email in rows:
        item = post.to_dict()
        item['email'] = email
        posts.append(item)
    return posts


def create_comment(post_id, user_id, content, now=None):
    """Add a comment and bump the parent's counter in one transaction."""
    if not post_id or not _has_text(content):
        raise ValidationError('Missing required fields: postId or comment')

    post = Post.query.filter_by(post_id=_to_id(post_id, 'postId')).first()
    if not post:
        raise NotFoundError('Post not found')

    author_id = _resolve_author(user_id).id if user_id else None

    comment = Comment(post_id=post.post_id, user_id=author_id, content=content,
                      created_at=now or datetime.utcnow())
    db.session.add(comment)
    Post.query.filter_by(post_id=post.post_id).update(
        {Post.comment_count: Post.comment_count + 1}, synchronize_session=False
    )
    db.session.commit()

    logger.info(f"Comment {comment.id} added to post {post.post_id}.")
    return comment


def list_comments(post_id):
    try:
        post_id = int(post_id)
    except (TypeError, ValueError):
        # An id that cannot exist has no comments
        return []
    comments = (Comment.query.filter_by(post_id=post_id)
                .order_by(Comment.created_at.desc(), Comment.id.desc())
                .all())
    return [comment.to_dict() for comment in comments]
