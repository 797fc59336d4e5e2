"""
Shared fixtures: a throwaway SQLite database per test.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from app.db.session import create_db_engine, get_db, init_db
from app.main import app
from app.models.user import User
from app.services.group_service import add_member, create_group


@pytest.fixture
def engine(tmp_path):
    """File-backed SQLite engine with all tables created."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(bind=engine)
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
def client(session_factory):
    """TestClient whose requests use the test database."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Insert a user directly (no password hashing) and return its id."""
    def _make_user(email: str):
        user = User(email=email, username=email.split("@")[0], hashed_password="x")
        db.add(user)
        db.flush()
        user_id = user.id
        db.commit()
        return user_id
    return _make_user


@pytest.fixture
def group_ab(db, make_user):
    """Group with members alice and bob; returns (group_id, alice_id, bob_id)."""
    alice = make_user("alice@example.com")
    bob = make_user("bob@example.com")
    group = create_group("Trip", alice, db)
    group_id = group.id
    add_member(group_id, alice, "bob@example.com", db)
    db.rollback()
    return group_id, alice, bob


@pytest.fixture
def register(client):
    """Sign up and log in through the API; returns (user_id, auth headers)."""
    def _register(email: str, password: str = "secret-pass"):
        response = client.post("/api/auth/signup", json={"email": email, "password": password})
        assert response.status_code == 201, response.text
        user_id = response.json()["id"]
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200, response.text
        return user_id, {"Authorization": f"Bearer {response.json()['access_token']}"}
    return _register
