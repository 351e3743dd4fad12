import enum
import datetime

from flask_login import UserMixin
from sqlalchemy.orm import validates

from kaleereads import db
from kaleereads.utils.password_handler import hash_password, verify_password, password_needs_rehash


class LinkState(enum.Enum):
    ACTIVE = 'active'
    REVOKED = 'revoked'


class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(20), default='reader', nullable=False)  # 'reader', 'author', 'admin'
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)

    access_links = db.relationship('AccessLink', back_populates='user', lazy=True,
                                   cascade='all, delete-orphan')

    def __str__(self):
        return self.name

    @property
    def is_admin(self):
        return self.role == 'admin'

    def set_password(self, password):
        self.password_hash = hash_password(password)

    def check_password(self, password):
        ok = verify_password(password, self.password_hash)
        if ok and password_needs_rehash(self.password_hash):
            self.password_hash = hash_password(password)
        return ok


class Author(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, unique=True)
    bio = db.Column(db.Text)

    user = db.relationship('User', backref=db.backref('author_profile', uselist=False))
    books = db.relationship('Book', back_populates='author', lazy=True)

    def __str__(self):
        return self.user.name if self.user else f'Author {self.id}'


class Book(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False, index=True)
    author_id = db.Column(db.Integer, db.ForeignKey('author.id'))
    file_key = db.Column(db.String(255))  # relative to BOOK_STORAGE_ROOT
    file_type = db.Column(db.String(20), default='pdf', nullable=False)  # 'pdf', 'epub'

    author = db.relationship('Author', back_populates='books')
    access_links = db.relationship('AccessLink', back_populates='book', lazy=True,
                                   cascade='all, delete-orphan')

    def __str__(self):
        return self.title

    def to_viewer_dict(self):
        """Shape consumed by the secure viewer."""
        author = None
        if self.author and self.author.user:
            author = {'user': {'name': self.author.user.name}}
        return {
            'id': self.id,
            'title': self.title,
            'fileType': self.file_type,
            'author': author,
        }


class AccessLink(db.Model):
    """Time-limited, revocable grant of one book to one user.

    ``expires_at`` is fixed once set and ``is_revoked`` only ever moves from
    False to True; both rules are enforced by the validators below.
    """
    id = db.Column(db.Integer, primary_key=True)
    token = db.Column(db.String(64), unique=True, nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    book_id = db.Column(db.Integer, db.ForeignKey('book.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
    is_revoked = db.Column(db.Boolean, default=False, nullable=False)

    user = db.relationship('User', back_populates='access_links')
    book = db.relationship('Book', back_populates='access_links')

    def __str__(self):
        return f"AccessLink {self.id}: book {self.book_id} for user {self.user_id} ({self.state.value})"

    @validates('is_revoked')
    def _validate_is_revoked(self, key, value):
        if self.is_revoked and not value:
            raise ValueError('A revoked access link cannot be reactivated')
        return bool(value)

    @validates('expires_at')
    def _validate_expires_at(self, key, value):
        if self.expires_at is not None and value != self.expires_at:
            raise ValueError('Access link expiry is fixed at creation')
        return value

    @property
    def state(self):
        return LinkState.REVOKED if self.is_revoked else LinkState.ACTIVE

    def revoke(self):
        self.is_revoked = True

    def is_expired(self, now=None):
        now = now or datetime.datetime.utcnow()
        return now >= self.expires_at

    def is_valid(self, now=None):
        return not self.is_revoked and not self.is_expired(now)
