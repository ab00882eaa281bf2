import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("AUTO_CREATE_TABLES", "false")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from seenlist import models  # noqa: F401
from seenlist.core.auth import CurrentUser, create_access_token
from seenlist.db import Base, get_db
from seenlist.main import app
from seenlist.repositories.list_repository import ListRepository
from seenlist.services.collaboration_service import CollaborationService
from seenlist.services.list_service import ListService
from seenlist.services.media_collection_service import MediaCollectionService


@pytest.fixture
def engine():
    """In-memory SQLite shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def owner():
    return CurrentUser(id="user-owner", email="owner@x.com", name="Olivia Owner")


@pytest.fixture
def alice():
    return CurrentUser(id="user-alice", email="alice@x.com", name="Alice")


@pytest.fixture
def bob():
    return CurrentUser(id="user-bob", email="bob@x.com", name="Bob")


@pytest.fixture
def list_repository(db):
    return ListRepository(db)


@pytest.fixture
def list_service(db):
    return ListService(db)


@pytest.fixture
def collaboration_service(db):
    return CollaborationService(db)


@pytest.fixture
def media_service(db):
    return MediaCollectionService(db)


@pytest.fixture
def movie_list(list_service, owner):
    return list_service.create(owner.id, "Movie Night")


@pytest.fixture
def shared_list(movie_list, collaboration_service, owner, alice):
    """A list alice has accepted to collaborate on."""
    collaboration_service.invite(movie_list.id, owner, alice.email)
    return collaboration_service.respond(movie_list.id, alice, alice.email, True)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user: CurrentUser):
        token = create_access_token({"sub": user.id, "email": user.email, "name": user.name})
        return {"Authorization": f"Bearer {token}"}
    return _headers
