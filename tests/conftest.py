import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from database.db import Base, get_db
from main import app
from schemas.bonuses import SubjectBonus
from schemas.grades import Grade
from schemas.students import StudentRecord

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def fresh_database():
    """Every test gets empty tables in the shared in-memory database."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client():
    def _override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_student(student_id, grades=(), bonuses=None, class_grade="3ème A"):
    """Build an engine record from (subject, value, coefficient) tuples."""
    return StudentRecord(
        id=student_id,
        matricule=f"M{student_id:03d}",
        first_name=f"Eleve{student_id}",
        last_name="Test",
        class_grade=class_grade,
        grades=[
            Grade(id=i, subject=subject, value=value, coefficient=coef)
            for i, (subject, value, coef) in enumerate(grades, start=1)
        ],
        subject_bonuses={
            subject: SubjectBonus(**bonus) for subject, bonus in (bonuses or {}).items()
        },
    )


@pytest.fixture()
def student_factory():
    return make_student
