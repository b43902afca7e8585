"""
Companies Repository.

Responsibilities:
- CRUD operations for the companies table.
- Filtered company search.

Non-Responsibilities:
- No payload validation beyond calling jobly.schema.
- No authorization.

Invariant:
Statement text never contains caller values; everything is bound.
"""

from typing import Any, Dict, List, Mapping, Optional

from ..errors import BadRequestError, NotFoundError
from ..filters import CompanySearch, compose_company_search
from ..retry import exponential_backoff
from ..schema import ensure_valid, validate_company_new, validate_company_update
from ..sql import NAMED, SqlParams, sql_for_partial_update
from .base import TextRepository

COMPANY_COLUMNS = (
    'handle, name, description, '
    'num_employees AS "numEmployees", logo_url AS "logoUrl"'
)

COMPANY_ALIASES = {
    "numEmployees": "num_employees",
    "logoUrl": "logo_url",
}


class CompanyRepository(TextRepository):
    """Company data access."""

    entity = "company"

    def create(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Create a company from data and return it.

        data should be { handle, name, description, numEmployees, logoUrl }

        Returns { handle, name, description, numEmployees, logoUrl }

        Raises BadRequestError if the payload is invalid or the handle is taken.
        """
        ensure_valid(validate_company_new(dict(data)))
        handle = data["handle"]

        with self.engine.begin() as conn:
            duplicate = self._execute(
                conn,
                "SELECT handle FROM companies WHERE handle = :handle",
                {"handle": handle},
            )
            if duplicate:
                self.logger.warning("Duplicate company", handle=handle)
                raise BadRequestError(f"Duplicate company: {handle}")

            rows = self._execute(
                conn,
                f"""INSERT INTO companies
                    (handle, name, description, num_employees, logo_url)
                    VALUES (:handle, :name, :description, :num_employees, :logo_url)
                    RETURNING {COMPANY_COLUMNS}""",
                {
                    "handle": handle,
                    "name": data["name"],
                    "description": data["description"],
                    "num_employees": data.get("numEmployees"),
                    "logo_url": data.get("logoUrl"),
                },
            )
        self.logger.info("Company created", handle=handle)
        return rows[0]

    @exponential_backoff(max_retries=2)
    def find_all(self, criteria: Optional[CompanySearch] = None) -> List[Dict[str, Any]]:
        """
        Find companies, optionally filtered.

        criteria:
            name (case-insensitive, partial matching)
            min_employees / max_employees (min above max is a BadRequestError)

        Returns [{ handle, name, description, numEmployees, logoUrl }, ...]
        ordered by name.
        """
        query = compose_company_search(
            f"SELECT {COMPANY_COLUMNS} FROM companies",
            criteria,
            paramstyle=NAMED,
            text_match_op=self.text_match_op,
        )
        return self._fetch_all(query.statement, query.bind_params)

    @exponential_backoff(max_retries=2)
    def get(self, handle: str) -> Dict[str, Any]:
        """
        Given a company handle, return data about the company.

        Returns { handle, name, description, numEmployees, logoUrl, jobs }
          where jobs is [{ id, title, salary, equity }, ...]

        Raises NotFoundError if not found.
        """
        company = self._fetch_one(
            f"SELECT {COMPANY_COLUMNS} FROM companies WHERE handle = :handle",
            {"handle": handle},
        )
        if company is None:
            self._not_found("Company not found", handle=handle)
            raise NotFoundError(f"No company: {handle}")

        company["jobs"] = self._fetch_all(
            """SELECT id, title, salary, equity
               FROM jobs
               WHERE company_handle = :handle
               ORDER BY id""",
            {"handle": handle},
        )
        return company

    def update(self, handle: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Update company data with `data`.

        This is a partial update: only the fields present in data change.
        Data can include: { name, description, numEmployees, logoUrl }

        Returns { handle, name, description, numEmployees, logoUrl }

        Raises NotFoundError if not found.
        """
        ensure_valid(validate_company_update(dict(data)))

        params = SqlParams(NAMED)
        update = sql_for_partial_update(data, COMPANY_ALIASES, params)
        handle_var = params.bind(handle)

        company = self._write_one(
            f"""UPDATE companies
                SET {update.set_cols}
                WHERE handle = {handle_var}
                RETURNING {COMPANY_COLUMNS}""",
            params.bind_params,
        )
        if company is None:
            self._not_found("Company not found for update", handle=handle)
            raise NotFoundError(f"No company: {handle}")
        self.logger.info("Company updated", handle=handle, fields=sorted(data))
        return company

    def remove(self, handle: str) -> None:
        """
        Delete given company; its jobs go with it.

        Raises NotFoundError if company not found.
        """
        deleted = self._write_one(
            "DELETE FROM companies WHERE handle = :handle RETURNING handle",
            {"handle": handle},
        )
        if deleted is None:
            self._not_found("Company not found for delete", handle=handle)
            raise NotFoundError(f"No company: {handle}")
        self.logger.info("Company removed", handle=handle)
