"""
Pytest configuration and shared fixtures.
"""

import pytest
from typing import Any, Dict, List

from jobly.database import init_database
from jobly.logger import get_logger, reset_logger
from jobly.repositories import CompanyRepository, JobRepository


@pytest.fixture(autouse=True)
def quiet_logger(tmp_path):
    """Route the global logger to a temp dir, with no console output."""
    reset_logger()
    logger = get_logger(log_dir=tmp_path / "logs", enable_console=False)
    yield logger
    reset_logger()


@pytest.fixture
def engine(tmp_path):
    """Fresh SQLite database with the companies and jobs tables."""
    engine = init_database(f"sqlite:///{tmp_path / 'jobly_test.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def sample_companies() -> List[Dict[str, Any]]:
    return [
        {"handle": "c1", "name": "C1", "numEmployees": 1,
         "description": "Desc1", "logoUrl": "http://c1.img"},
        {"handle": "c2", "name": "C2", "numEmployees": 2,
         "description": "Desc2", "logoUrl": "http://c2.img"},
        {"handle": "c3", "name": "C3", "numEmployees": 3,
         "description": "Desc3", "logoUrl": "http://c3.img"},
    ]


@pytest.fixture
def sample_jobs() -> List[Dict[str, Any]]:
    return [
        {"title": "Job1", "salary": 100, "equity": 0.1, "companyHandle": "c1"},
        {"title": "Job2", "salary": 200, "equity": 0.2, "companyHandle": "c1"},
        {"title": "Job3", "salary": 300, "equity": 0, "companyHandle": "c1"},
        {"title": "Job4", "salary": None, "equity": None, "companyHandle": "c1"},
    ]


@pytest.fixture
def companies(engine, sample_companies) -> CompanyRepository:
    """Company repository over a database holding c1, c2, c3."""
    repo = CompanyRepository(engine)
    for company in sample_companies:
        repo.create(company)
    return repo


@pytest.fixture
def jobs(engine, companies, sample_jobs) -> JobRepository:
    """Job repository over a database holding Job1..Job4, all at c1."""
    repo = JobRepository(engine)
    for job in sample_jobs:
        repo.create(job)
    return repo


@pytest.fixture
def job_ids(jobs) -> Dict[str, int]:
    """Map job title -> generated id."""
    return {job["title"]: job["id"] for job in jobs.find_all()}
