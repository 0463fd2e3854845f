"""
Pytest Configuration and Shared Fixtures for API Tests

This conftest.py provides:
- db_engine_and_session: schema created once per session
- clean_tables: every test starts from empty tables
- store: Storage unit of work for seeding / asserting
- client: FastAPI TestClient for HTTP requests
- admin / employee: seeded principals with bearer headers
- agency: Acme client with SEO/PPC services, tasks and attachments
"""
import sys
from pathlib import Path

import pytest

# Add api/ to Python path (for imports like 'from models import ...')
api_dir = Path(__file__).parent.parent
if str(api_dir) not in sys.path:
    sys.path.insert(0, str(api_dir))


@pytest.fixture(scope="session")
def db_engine_and_session():
    """
    Database engine and SessionLocal from db module.

    Creates schema once for entire test session.
    Returns tuple: (engine, SessionLocal, Base)
    """
    from db import engine, SessionLocal
    from models import Base

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    return engine, SessionLocal, Base


@pytest.fixture(autouse=True)
def clean_tables(db_engine_and_session):
    """Empty every table before each test."""
    engine, _, Base = db_engine_and_session
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
    yield


@pytest.fixture
def store(db_engine_and_session):
    """Storage bound to its own session; closed after the test."""
    from storage import Storage

    _, SessionLocal, _ = db_engine_and_session
    session = SessionLocal()
    yield Storage(session)
    session.rollback()
    session.close()


@pytest.fixture(scope="session")
def app(db_engine_and_session):
    from main import app
    return app


@pytest.fixture(scope="session")
def client(app):
    """
    FastAPI TestClient for HTTP requests.

    Uses the same database as the store fixture.
    """
    from fastapi.testclient import TestClient
    return TestClient(app)


def bearer(employee) -> dict:
    """Authorization headers for an Employee record."""
    from auth import create_access_token

    token = create_access_token(employee.id, employee.email, employee.role.value)
    return {"Authorization": f"Bearer {token}"}


def _seed_employee(store, **fields):
    import crud_employees

    employees, employee = crud_employees.create_employee(store.employees.load(), **fields)
    store.employees.save(employees)
    store.commit()
    return employee


@pytest.fixture
def admin(store):
    """Seeded ADMIN employee. Returns (employee, headers)."""
    from records import Role

    employee = _seed_employee(
        store, full_name="Ada Admin", email="ada@agency.test", role=Role.ADMIN, salary_fixed=4000
    )
    return employee, bearer(employee)


@pytest.fixture
def employee(store):
    """Seeded EMPLOYEE. Returns (employee, headers)."""
    employee = _seed_employee(store, full_name="Anna Employee", email="anna@agency.test", salary_fixed=2400)
    return employee, bearer(employee)


@pytest.fixture
def second_employee(store):
    employee = _seed_employee(store, full_name="Boris Employee", email="boris@agency.test", salary_fixed=2000)
    return employee, bearer(employee)


@pytest.fixture
def agency(store):
    """
    Catalog used by most report tests.

    Client "Acme" with SEO (HOURLY) and PPC (COMMISSION) attached;
    tasks: SEO/Audit, PPC/Setup.

    Returns: dict of records keyed by short names.
    """
    import catalog
    from records import PricingType

    clients, acme = catalog.create_client(store.clients.load(), name="Acme", company="Acme Ltd")
    clients, globex = catalog.create_client(clients, name="Globex")
    services, seo = catalog.create_service(store.services.load(), name="SEO", pricing_type=PricingType.HOURLY)
    services, ppc = catalog.create_service(services, name="PPC", pricing_type=PricingType.COMMISSION)
    tasks, audit = catalog.create_task(store.tasks.load(), services, service_id=seo.id, name="Audit")
    tasks, setup = catalog.create_task(tasks, services, service_id=ppc.id, name="Setup")
    client_services, acme_seo = catalog.attach_service(
        store.client_services.load(), clients, services, client_id=acme.id, service_id=seo.id, hourly_rate=40
    )
    client_services, acme_ppc = catalog.attach_service(
        client_services, clients, services, client_id=acme.id, service_id=ppc.id
    )

    store.clients.save(clients)
    store.services.save(services)
    store.tasks.save(tasks)
    store.client_services.save(client_services)
    store.commit()

    return {
        "acme": acme,
        "globex": globex,
        "seo": seo,
        "ppc": ppc,
        "audit": audit,
        "setup": setup,
        "acme_seo": acme_seo,
        "acme_ppc": acme_ppc,
    }
