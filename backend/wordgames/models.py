from wordgames import db, bcrypt
from flask_login import UserMixin
from datetime import datetime, timezone
import uuid

ROLE_USER = 'USER'
ROLE_SUPER_ADMIN = 'SUPER_ADMIN'


def _uuid():
    return str(uuid.uuid4())


def _now():
    return datetime.now(timezone.utc)


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(32), nullable=False, default=ROLE_USER)
    total_game_played = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_now)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'role': self.role,
            'total_game_played': self.total_game_played,
        }


class GameTemplate(db.Model):
    __tablename__ = 'game_template'
    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    slug = db.Column(db.String(64), unique=True, nullable=False, index=True)
    name = db.Column(db.String(128), nullable=False)


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    game_template_id = db.Column(db.String(36), db.ForeignKey('game_template.id'), nullable=False)
    creator_id = db.Column(db.String(36), db.ForeignKey('user.id'), nullable=False, index=True)
    name = db.Column(db.String(128), unique=True, nullable=False)
    description = db.Column(db.String(256), nullable=True)
    thumbnail_image = db.Column(db.String(512), nullable=True)
    is_published = db.Column(db.Boolean, nullable=False, default=False)
    total_played = db.Column(db.Integer, nullable=False, default=0)
    game_json = db.Column(db.JSON, nullable=False, default=dict)
    # Bumped on every flush of this row; a stale concurrent write fails instead of overwriting
    revision = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_now)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    game_template = db.relationship('GameTemplate')
    creator = db.relationship('User')
    leaderboard = db.relationship(
        'Leaderboard', back_populates='game', cascade='all, delete-orphan',
    )

    __mapper_args__ = {'version_id_col': revision}

    @property
    def template_slug(self):
        return self.game_template.slug if self.game_template else None

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'thumbnail_image': self.thumbnail_image,
            'is_published': self.is_published,
            'total_played': self.total_played,
            'revision': self.revision,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }


class Leaderboard(db.Model):
    __tablename__ = 'leaderboard'
    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    game_id = db.Column(db.String(36), db.ForeignKey('game.id', ondelete='CASCADE'), nullable=False, index=True)
    # Anonymous plays have no user
    user_id = db.Column(db.String(36), db.ForeignKey('user.id', ondelete='SET NULL'), nullable=True, index=True)
    score = db.Column(db.Integer, nullable=False)
    time_taken = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_now)

    game = db.relationship('Game', back_populates='leaderboard')
    user = db.relationship('User')

    def to_dict(self, include_user=True):
        data = {
            'id': self.id,
            'score': self.score,
            'time_taken': self.time_taken,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if include_user:
            data['user'] = {'id': self.user.id, 'username': self.user.username} if self.user else None
        return data
