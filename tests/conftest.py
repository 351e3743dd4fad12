import os
import pytest
from flask import g
from flask.testing import FlaskClient

os.environ.setdefault('SECRET_KEY', 'test-secret-key')
os.environ['SCHEDULER_ENABLED'] = 'false'

from kaleereads import create_app, db
from kaleereads.models import User, Author, Book
from kaleereads.utils.auth_tokens import issue_bearer_token


class BearerClient(FlaskClient):
    """Test client that re-resolves the principal on every request.

    The fixture keeps one app context open, so Flask-Login would otherwise
    reuse the user cached in ``g`` by a previous request.
    """

    def open(self, *args, **kwargs):
        g.pop("_login_user", None)
        return super().open(*args, **kwargs)


@pytest.fixture
def app(tmp_path):
    """Create and configure a test app."""
    # Ensure the app factory picks up the in-memory SQLite DB for tests
    os.environ['DATABASE_URL'] = 'sqlite:///:memory:'
    os.environ['AUDIT_LOG_DIR'] = str(tmp_path / 'logs')
    os.environ['BOOK_STORAGE_ROOT'] = str(tmp_path / 'books')
    app = create_app()
    app.config["TESTING"] = True
    app.test_client_class = BearerClient

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """A test runner for the app's Click commands."""
    return app.test_cli_runner()


@pytest.fixture
def reader(app):
    """Create a regular reader."""
    user = User(name='Reader Test', email='reader@test.com', role='reader')
    user.set_password('password')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def admin_user(app):
    """Create an admin user."""
    user = User(name='Admin Test', email='admin@test.com', role='admin')
    user.set_password('password')
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def book(app):
    """A PDF book by a registered author, with its file on disk."""
    writer = User(name='Chebet Kiprono', email='author@test.com', role='author')
    writer.set_password('password')
    db.session.add(writer)
    db.session.flush()
    author = Author(user_id=writer.id, bio='Storyteller')
    db.session.add(author)
    db.session.flush()
    b = Book(title='Kalenjin Tales', author_id=author.id, file_key='1/kalenjin-tales.pdf', file_type='pdf')
    db.session.add(b)
    db.session.commit()

    path = os.path.join(app.config['BOOK_STORAGE_ROOT'], '1')
    os.makedirs(path, exist_ok=True)
    with open(os.path.join(path, 'kalenjin-tales.pdf'), 'wb') as f:
        f.write(b'%PDF-1.4 test document')
    return b


@pytest.fixture
def auth_headers(app):
    """Build an Authorization header for a user."""
    def _headers(user):
        return {'Authorization': f'Bearer {issue_bearer_token(user)}'}
    return _headers
