# safespace/community/models.py
from datetime import datetime
from safespace.init_db import db

class Post(db.Model):
    __tablename__ = 'posts'
    post_id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    user = db.relationship('User', backref=db.backref('posts', lazy=True))
    post_content = db.Column(db.Text, nullable=False)
    post_created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    comment_count = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            'post_id': self.post_id,
            'user_id': self.user_id,
            'post_content': self.post_content,
            'post_created_at': self.post_created_at.isoformat(),
            'comment_count': self.comment_count,
        }

class Comment(db.Model):
    __tablename__ = 'comments'
    id = db.Column(db.Integer, primary_key=True)
    post_id = db.Column(db.Integer, db.ForeignKey('posts.post_id'), nullable=False)
    post = db.relationship('Post', backref=db.backref('comments', lazy=True))
    # Null for anonymous comments
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'post_id': self.post_id,
            'user_id': self.user_id,
            'content': self.content,
            'created_at': self.created_at.isoformat(),
        }
