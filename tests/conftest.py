"""This module contains fixtures for setting up the testing environment for the admin_panel application.
It includes a populated database, application context, database sessions and a recording store
used to observe the order of cascade operations."""
import os
import tempfile
import logging
from pathlib import Path
import pytest

from admin_panel import create_app, model
from admin_panel.database import get_session, init_db, close_db
from admin_panel.db_actions import RecordStore

logger = logging.getLogger(__name__)


def populate(session):
    """
    Fill the database with users, their blogs, settings, tokens, roles and routes.

    Graph of the data, an arrow reading "depends on":
        alice -> admin (added_by)
        bob -> alice (added_by), carol -> alice (updated_by)
        3 blogs -> alice (added_by), 2 blogs -> alice (updated_by), 1 blog -> bob (added_by)
        alice's auth settings, token and user role -> alice (user_id)
        editor role: 2 route roles and 3 user roles (alice, bob, carol)
        viewer role: 1 route role and 1 user role (admin)

    Returns:
        dict: name to id of every record created.
    """
    admin = model.User(email="admin@example.com", username="admin", user_type=model.UserTypeEnum.ADMIN)
    session.add(admin)
    session.flush()

    alice = model.User(email="alice@example.com", username="alice", added_by=admin.id)
    session.add(alice)
    session.flush()

    bob = model.User(email="bob@example.com", username="bob", added_by=alice.id)
    carol = model.User(email="carol@example.com", username="carol", added_by=admin.id, updated_by=alice.id)
    session.add_all([bob, carol])
    session.flush()

    authored = [model.Blog(title=f"Authored {i}", added_by=alice.id) for i in range(3)]
    edited = [model.Blog(title=f"Edited {i}", added_by=admin.id, updated_by=alice.id) for i in range(2)]
    bob_blog = model.Blog(title="Bob's", added_by=bob.id)
    settings = model.UserAuthSettings(user_id=alice.id, added_by=admin.id)
    token = model.UserToken(user_id=alice.id, token="alice-token", added_by=admin.id)

    editor = model.Role(name="editor", code="EDITOR", added_by=admin.id)
    viewer = model.Role(name="viewer", code="VIEWER", added_by=admin.id)
    blog_route = model.ProjectRoute(route_name="blog", method="GET", uri="/blog", added_by=admin.id)
    user_route = model.ProjectRoute(route_name="user", method="GET", uri="/user", added_by=admin.id)
    session.add_all([*authored, *edited, bob_blog, settings, token, editor, viewer, blog_route, user_route])
    session.flush()

    route_roles = [
        model.RouteRole(route_id=blog_route.id, role_id=editor.id),
        model.RouteRole(route_id=user_route.id, role_id=editor.id),
        model.RouteRole(route_id=blog_route.id, role_id=viewer.id),
    ]
    user_roles = [
        model.UserRole(user_id=alice.id, role_id=editor.id),
        model.UserRole(user_id=bob.id, role_id=editor.id),
        model.UserRole(user_id=carol.id, role_id=editor.id),
        model.UserRole(user_id=admin.id, role_id=viewer.id),
    ]
    session.add_all([*route_roles, *user_roles])
    session.commit()

    return {
        "admin": admin.id,
        "alice": alice.id,
        "bob": bob.id,
        "carol": carol.id,
        "authored": [b.id for b in authored],
        "edited": [b.id for b in edited],
        "bob_blog": bob_blog.id,
        "settings": settings.id,
        "token": token.id,
        "editor": editor.id,
        "viewer": viewer.id,
        "blog_route": blog_route.id,
        "user_route": user_route.id,
        "route_roles": [r.id for r in route_roles],
        "user_roles": [r.id for r in user_roles],
    }


class RecordingStore(RecordStore):
    """
    RecordStore keeping track of every mutation, in order.
    """
    def __init__(self, session):
        super().__init__(session)
        self.calls = []

    def destroy(self, kind, record_filter):
        self.calls.append(("destroy", kind, list(record_filter["id"])))
        return super().destroy(kind, record_filter)

    def update(self, kind, record_filter, patch):
        self.calls.append(("update", kind, list(record_filter["id"])))
        return super().update(kind, record_filter, patch)


@pytest.fixture
def app():
    """
    Create a Flask application for testing with a temporary database.
    If the DEBUG environment variable is set, it uses a predefined database path;
    otherwise, it creates a temporary database file.
    """
    if os.getenv('DEBUG'):
        db_path = Path(os.path.join("instance", "test_db.sql"))
        db_path.unlink(missing_ok=True)
        logger.debug("DB is here %s", db_path)
    else:
        db_fd, db_path = tempfile.mkstemp()

    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret-key',
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{db_path}",
    })

    with app.app_context():
        init_db()

    yield app

    if not os.getenv('DEBUG'):
        os.close(db_fd)
        os.unlink(db_path)

@pytest.fixture
def not_app_db():
    """
    Create a database session without an application context, on a temporary SQLite database.
    """
    if os.getenv('DEBUG'):
        db_path = Path(os.path.join("instance", "test_db.sql"))
        db_path.unlink(missing_ok=True)
        logger.debug("DB is here %s", db_path)
    else:
        db_fd, db_path = tempfile.mkstemp()
    db_uri = f'sqlite:///{db_path}'
    init_db(db_uri)
    db = get_session(no_app=True, db_uri=db_uri)

    try:
        yield db
    finally:
        db.close()
        close_db(no_app=True)
        if not os.getenv('DEBUG'):
            os.close(db_fd)
            os.unlink(db_path)

@pytest.fixture
def filled_db(not_app_db):
    """
    Session on a populated database, with the ids of the records created.
    """
    return not_app_db, populate(not_app_db)

@pytest.fixture
def filled_app(app):
    """
    Application on a populated database, with the ids of the records created.
    """
    with app.app_context():
        ids = populate(get_session())
    return app, ids

@pytest.fixture
def client(app):
    """
    A test client for the Flask application.
    """
    return app.test_client()

@pytest.fixture
def runner(app):
    """
    A test runner for the Flask application command-line commands.
    """
    return app.test_cli_runner()
