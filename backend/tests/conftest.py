"""Pytest fixtures: one application and one fresh in-memory database per test.

Services commit through their unit of work, so isolation comes from a brand
new SQLite ``:memory:`` engine per application instead of nested
transactions.
"""

from __future__ import annotations

import os

import pytest

from blogapi.core.config import TestingConfig
from blogapi.core.extensions import db as _db
from blogapi.factory import create_app


@pytest.fixture()
def app_config():
    """Config class used by :func:`app`; override in a module to tweak settings."""
    return TestingConfig


@pytest.fixture()
def app(app_config):
    """Create the Flask application with an active app context.

    Yields
    ------
    flask.Flask
        Application bound to an empty, freshly created schema.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(app_config, instance_relative_config=False)
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def session(app):
    """Flask-scoped SQLAlchemy session used by services and factories."""
    return _db.session


@pytest.fixture()
def client(app):
    """Flask test client sharing the fixture's app context."""
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to the application session ---------------------------
@pytest.fixture(autouse=True)
def _factories_session(request):
    """Wire Factory Boy's session helper for tests that use the database."""
    from tests.factories import SQLAlchemySession

    if "app" in request.fixturenames:
        SQLAlchemySession.set(request.getfixturevalue("session"))
    yield
    SQLAlchemySession.set(None)
