"""
Search criteria for companies and jobs.

Each criteria class knows its query-string names, its cross-field rules,
and the fixed order its predicates are composed in.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from .errors import BadRequestError
from .sql import ComposedQuery, FilterComposer, Predicate, NUMERIC_DOLLAR

TRUE_STRINGS = {"true", "1", "yes"}
FALSE_STRINGS = {"false", "0", "no"}


def _parse_text(key: str, raw: Any, errors: List[str]) -> Optional[str]:
    if not isinstance(raw, str) or raw.strip() == "":
        errors.append(f"Filter '{key}' must be a non-empty string")
        return None
    return raw.strip()


def _parse_count(key: str, raw: Any, errors: List[str]) -> Optional[int]:
    if isinstance(raw, bool):
        errors.append(f"Filter '{key}' must be a non-negative integer")
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError):
        errors.append(f"Filter '{key}' must be a non-negative integer")
        return None
    if value < 0 or (not isinstance(raw, str) and value != raw):
        errors.append(f"Filter '{key}' must be a non-negative integer")
        return None
    return value


def _parse_flag(key: str, raw: Any, errors: List[str]) -> Optional[bool]:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in TRUE_STRINGS:
        return True
    if text in FALSE_STRINGS:
        return False
    errors.append(f"Filter '{key}' must be true or false")
    return None


def _parse_query(args: Mapping[str, Any], fields: Dict[str, tuple]) -> Dict[str, Any]:
    """Map query-string keys to criteria attributes, collecting every problem."""
    errors: List[str] = []
    parsed: Dict[str, Any] = {}
    for key, raw in args.items():
        if key not in fields:
            errors.append(f"Unknown filter: {key}")
            continue
        attr, parse = fields[key]
        value = parse(key, raw, errors)
        if value is not None:
            parsed[attr] = value
    if errors:
        raise BadRequestError("; ".join(errors))
    return parsed


class SearchCriteria:
    """Base for per-entity criteria; absent criteria are None."""

    def validate(self) -> None:
        """Check cross-field rules. Raise BadRequestError on violation."""


@dataclass
class CompanySearch(SearchCriteria):
    """
    Company filters.

    name: case-insensitive partial match on the company name.
    min_employees / max_employees: inclusive bounds on num_employees.
    """

    name: Optional[str] = None
    min_employees: Optional[int] = None
    max_employees: Optional[int] = None

    QUERY_FIELDS = {
        "name": ("name", _parse_text),
        "minEmployees": ("min_employees", _parse_count),
        "maxEmployees": ("max_employees", _parse_count),
    }

    def validate(self) -> None:
        if (
            self.min_employees is not None
            and self.max_employees is not None
            and self.min_employees > self.max_employees
        ):
            raise BadRequestError("Minimum employees cannot exceed maximum employees.")

    @classmethod
    def from_query(cls, args: Mapping[str, Any]) -> "CompanySearch":
        """Build criteria from query-string arguments (minEmployees=10, ...)."""
        return cls(**_parse_query(args, cls.QUERY_FIELDS))


@dataclass
class JobSearch(SearchCriteria):
    """
    Job filters.

    title: case-insensitive partial match on the job title.
    min_salary: inclusive lower bound on salary.
    has_equity: True restricts to jobs with non-zero equity; False is the
        same as not filtering.
    """

    title: Optional[str] = None
    min_salary: Optional[int] = None
    has_equity: Optional[bool] = None

    QUERY_FIELDS = {
        "title": ("title", _parse_text),
        "minSalary": ("min_salary", _parse_count),
        "hasEquity": ("has_equity", _parse_flag),
    }

    @classmethod
    def from_query(cls, args: Mapping[str, Any]) -> "JobSearch":
        """Build criteria from query-string arguments (hasEquity=true, ...)."""
        return cls(**_parse_query(args, cls.QUERY_FIELDS))


COMPANY_FILTERS = FilterComposer(
    [
        Predicate.contains("name", "name"),
        Predicate.minimum("min_employees", "num_employees"),
        Predicate.maximum("max_employees", "num_employees"),
    ],
    order_by="name",
)

JOB_FILTERS = FilterComposer(
    [
        Predicate.contains("title", "title"),
        Predicate.minimum("min_salary", "salary"),
        Predicate.flag("has_equity", "equity", "equity > 0"),
    ],
    order_by="title",
)


def compose_company_search(
    base_select: str,
    criteria: Optional[CompanySearch] = None,
    paramstyle: str = NUMERIC_DOLLAR,
    text_match_op: str = "ILIKE",
) -> ComposedQuery:
    return COMPANY_FILTERS.compose(
        base_select, criteria or CompanySearch(), paramstyle, text_match_op
    )


def compose_job_search(
    base_select: str,
    criteria: Optional[JobSearch] = None,
    paramstyle: str = NUMERIC_DOLLAR,
    text_match_op: str = "ILIKE",
) -> ComposedQuery:
    return JOB_FILTERS.compose(
        base_select, criteria or JobSearch(), paramstyle, text_match_op
    )
