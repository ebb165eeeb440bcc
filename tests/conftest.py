import pytest
import os
from datetime import timedelta
from decimal import Decimal
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"

from backoffice.database import Base, get_db
from backoffice.main import app
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# pysqlite defers BEGIN on its own; hand transaction control to SQLAlchemy so
# SAVEPOINTs nest inside the per-test transaction.
@event.listens_for(engine, "connect")
def _disable_pysqlite_transactions(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None

@event.listens_for(engine, "begin")
def _emit_begin(conn):
    conn.exec_driver_sql("BEGIN")

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def db_session():
    """
    Clean database session per test. Service commits and rollbacks act on
    savepoints; the outer transaction is discarded afterwards.
    """
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection, join_transaction_mode="create_savepoint")

    yield session

    session.close()
    transaction.rollback()
    connection.close()

@pytest.fixture(scope="function")
def branch(db_session):
    from backoffice.models.branch import Branch
    branch = Branch(name="Downtown")
    db_session.add(branch)
    db_session.commit()
    return branch

@pytest.fixture(scope="function")
def other_branch(db_session):
    from backoffice.models.branch import Branch
    branch = Branch(name="Airport")
    db_session.add(branch)
    db_session.commit()
    return branch

@pytest.fixture(scope="function")
def admin_user(db_session):
    """Admin with access to every branch."""
    from backoffice.models.user import User, UserRole
    user = User(email="admin@backoffice.test", full_name="System Admin", role=UserRole.ADMIN, is_active=True)
    db_session.add(user)
    db_session.commit()
    return user

@pytest.fixture(scope="function")
def accountant(db_session, branch):
    """Accountant restricted to the default branch."""
    from backoffice.models.user import User, UserRole
    user = User(
        email="accountant@backoffice.test",
        full_name="Branch Accountant",
        role=UserRole.ACCOUNTANT,
        branch_id=branch.id,
        is_active=True
    )
    db_session.add(user)
    db_session.commit()
    return user

@pytest.fixture(scope="function")
def outside_accountant(db_session, other_branch):
    """Accountant assigned to a different branch."""
    from backoffice.models.user import User, UserRole
    user = User(
        email="outsider@backoffice.test",
        full_name="Other Accountant",
        role=UserRole.ACCOUNTANT,
        branch_id=other_branch.id,
        is_active=True
    )
    db_session.add(user)
    db_session.commit()
    return user

@pytest.fixture(scope="function")
def employee(db_session, branch):
    """Employee with base salary 500 and allowance 50 (gross 550)."""
    from backoffice.models.employee import Employee, EmployeeStatus
    emp = Employee(
        name="Sara Haddad",
        branch_id=branch.id,
        base_salary=Decimal("500.00"),
        allowance=Decimal("50.00"),
        status=EmployeeStatus.ACTIVE
    )
    db_session.add(emp)
    db_session.commit()
    return emp

@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens for a user."""
    from backoffice.core.security import create_access_token

    def _get_token(user, expires_delta=None):
        return create_access_token(
            data={"sub": str(user.id), "role": user.role.value, "type": "access"},
            expires_delta=expires_delta,
        )
    return _get_token

@pytest.fixture(scope="function")
def auth_headers(get_token):
    def _auth_headers(user):
        return {"Authorization": f"Bearer {get_token(user)}"}
    return _auth_headers

@pytest.fixture(scope="function")
def expired_token(get_token, admin_user):
    return get_token(admin_user, expires_delta=timedelta(minutes=-5))

@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
