"""
Shared pytest fixtures for the Host Group Admin test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - seeded: Full host group fixture data (groups, dependents, user group)
"""

import pytest

from groupadmin import create_app
from groupadmin.models import db as _db


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Convenience fixtures ─────────────────────────────────────────────────


@pytest.fixture()
def seeded():
    """Seed every fixture the conformance scenarios rely on.

    Returns the dict ``seed_all`` hands to the runner
    (update_group, delete_group, user_groupid).
    """
    from groupadmin.services.seed_service import seed_all
    return seed_all()


@pytest.fixture()
def group_id():
    """Return a helper that looks up a host group id by name."""
    from groupadmin.models.hostgroup import HostGroup

    def _lookup(name):
        group = HostGroup.query.filter_by(name=name).first()
        assert group is not None, f"host group {name!r} should exist"
        return group.groupid

    return _lookup
