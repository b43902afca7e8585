"""
Jobs Repository.

Responsibilities:
- CRUD operations for the jobs table.
- Filtered job search, joined with the owning company's name.

Non-Responsibilities:
- No payload validation beyond calling jobly.schema.
- No authorization.

Invariant:
Statement text never contains caller values; everything is bound.
"""

from typing import Any, Dict, List, Mapping, Optional

from ..errors import BadRequestError, NotFoundError
from ..filters import JobSearch, compose_job_search
from ..retry import exponential_backoff
from ..schema import ensure_valid, validate_job_new, validate_job_update
from ..sql import NAMED, SqlParams, sql_for_partial_update
from .base import TextRepository
from .companies import COMPANY_COLUMNS

JOB_COLUMNS = 'id, title, salary, equity, company_handle AS "companyHandle"'

JOB_SEARCH_SELECT = """SELECT j.id,
                              j.title,
                              j.salary,
                              j.equity,
                              j.company_handle AS "companyHandle",
                              c.name AS "companyName"
                       FROM jobs j
                       LEFT JOIN companies AS c ON c.handle = j.company_handle"""


class JobRepository(TextRepository):
    """Job data access."""

    entity = "job"

    def create(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Create a job and return it.

        data = { title, salary, equity, companyHandle }

        Returns { id, title, salary, equity, companyHandle }

        Raises BadRequestError if the payload is invalid or the company
        does not exist.
        """
        ensure_valid(validate_job_new(dict(data)))
        company_handle = data["companyHandle"]

        with self.engine.begin() as conn:
            company = self._execute(
                conn,
                "SELECT handle FROM companies WHERE handle = :handle",
                {"handle": company_handle},
            )
            if not company:
                raise BadRequestError(f"No company: {company_handle}")

            rows = self._execute(
                conn,
                f"""INSERT INTO jobs (title, salary, equity, company_handle)
                    VALUES (:title, :salary, :equity, :company_handle)
                    RETURNING {JOB_COLUMNS}""",
                {
                    "title": data["title"],
                    "salary": data.get("salary"),
                    "equity": data.get("equity"),
                    "company_handle": company_handle,
                },
            )
        job = rows[0]
        self.logger.info("Job created", id=job["id"], company=company_handle)
        return job

    @exponential_backoff(max_retries=2)
    def find_all(self, criteria: Optional[JobSearch] = None) -> List[Dict[str, Any]]:
        """
        Find jobs, optionally filtered.

        criteria:
            title (case-insensitive, partial matching)
            min_salary
            has_equity (True: only jobs with non-zero equity)

        Returns [{ id, title, salary, equity, companyHandle, companyName }, ...]
        ordered by title.
        """
        query = compose_job_search(
            JOB_SEARCH_SELECT,
            criteria,
            paramstyle=NAMED,
            text_match_op=self.text_match_op,
        )
        return self._fetch_all(query.statement, query.bind_params)

    @exponential_backoff(max_retries=2)
    def get(self, job_id: int) -> Dict[str, Any]:
        """
        Given an id, return job data.

        Returns { id, title, salary, equity, company }
          where company is { handle, name, description, numEmployees, logoUrl }

        Raises NotFoundError if not found.
        """
        job = self._fetch_one(
            f"SELECT {JOB_COLUMNS} FROM jobs WHERE id = :id",
            {"id": job_id},
        )
        if job is None:
            self._not_found("Job not found", id=job_id)
            raise NotFoundError(f"No job: {job_id}")

        job["company"] = self._fetch_one(
            f"SELECT {COMPANY_COLUMNS} FROM companies WHERE handle = :handle",
            {"handle": job.pop("companyHandle")},
        )
        return job

    def update(self, job_id: int, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Partial update of job data.

        Data may include: { title, salary, equity }

        Returns { id, title, salary, equity, companyHandle }

        Raises NotFoundError if not found.
        """
        ensure_valid(validate_job_update(dict(data)))

        params = SqlParams(NAMED)
        update = sql_for_partial_update(data, {}, params)
        id_var = params.bind(job_id)

        job = self._write_one(
            f"""UPDATE jobs
                SET {update.set_cols}
                WHERE id = {id_var}
                RETURNING {JOB_COLUMNS}""",
            params.bind_params,
        )
        if job is None:
            self._not_found("Job not found for update", id=job_id)
            raise NotFoundError(f"No job: {job_id}")
        self.logger.info("Job updated", id=job_id, fields=sorted(data))
        return job

    def remove(self, job_id: int) -> None:
        """
        Delete job by id.

        Raises NotFoundError if not found.
        """
        deleted = self._write_one(
            "DELETE FROM jobs WHERE id = :id RETURNING id",
            {"id": job_id},
        )
        if deleted is None:
            self._not_found("Job not found for delete", id=job_id)
            raise NotFoundError(f"No job: {job_id}")
        self.logger.info("Job removed", id=job_id)
