"""
Shared fixtures: an in-memory database, an application wired to it, and a
few tenants and users.

The client talks to acme.resumehub.example, so requests are routed to the
"acme" tenant by subdomain unless a test says otherwise.
"""
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

import resumehub.models  # noqa: F401
from resumehub.config import Settings
from resumehub.database import Base, build_session_factory
from resumehub.main import create_app
from resumehub.models.tenant import Tenant
from tests.factories import ACME_HOST, GLOBEX_DOMAIN, auth_headers, make_user


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        RATE_LIMIT_ENABLED=False,
        TENANT_QUERY_PARAM_ENABLED=True,
        EVENT_WORKERS=2,
    )


@pytest.fixture
def notifier():
    notifier = Mock()
    notifier.send_analysis_complete.return_value = True
    return notifier


@pytest.fixture
def app(settings, engine, notifier):
    app = create_app(settings, engine=engine, notification_service=notifier)
    yield app
    app.state.event_bus.shutdown(wait=True)


@pytest.fixture
def client(app):
    return TestClient(app, base_url=f"http://{ACME_HOST}")


@pytest.fixture
def acme(db):
    tenant = Tenant(name="Acme", subdomain="acme", plan="professional")
    db.add(tenant)
    db.commit()
    return tenant


@pytest.fixture
def globex(db):
    tenant = Tenant(name="Globex", domain=GLOBEX_DOMAIN)
    db.add(tenant)
    db.commit()
    return tenant


@pytest.fixture
def ada(db, acme):
    return make_user(db, acme, "ada@example.com", name="Ada Lovelace")


@pytest.fixture
def grace(db, acme):
    return make_user(db, acme, "grace@example.com", name="Grace Hopper")


@pytest.fixture
def ada_headers(ada):
    return auth_headers(ada)


@pytest.fixture
def grace_headers(grace):
    return auth_headers(grace)
