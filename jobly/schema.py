import re
from typing import Any, Dict, List
from urllib.parse import urlparse

from .errors import BadRequestError

HANDLE_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
HANDLE_MAX_LENGTH = 25

COMPANY_NEW_REQUIRED = ["handle", "name", "description"]
COMPANY_UPDATABLE = ["name", "description", "numEmployees", "logoUrl"]
JOB_NEW_REQUIRED = ["title", "companyHandle"]
JOB_UPDATABLE = ["title", "salary", "equity"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_count(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool) and v >= 0


def _is_equity(v: Any) -> bool:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return False
    return 0 <= v <= 1


def _valid_url(v: str) -> bool:
    p = urlparse(v)
    return bool(p.scheme and p.netloc)


def _check_unknown(data: Dict[str, Any], allowed: List[str], errors: List[str]) -> None:
    for f in data:
        if f not in allowed:
            errors.append(f"Field '{f}' is not allowed")


def _check_company_fields(data: Dict[str, Any], errors: List[str]) -> None:
    for f in ("name", "description"):
        if f in data and not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")
    if "numEmployees" in data and data["numEmployees"] is not None:
        if not _is_count(data["numEmployees"]):
            errors.append("Field 'numEmployees' must be a non-negative integer")
    if "logoUrl" in data and data["logoUrl"] is not None:
        if not isinstance(data["logoUrl"], str) or not _valid_url(data["logoUrl"]):
            errors.append("Field 'logoUrl' must be a valid absolute URL (scheme + host)")


def _check_job_fields(data: Dict[str, Any], errors: List[str]) -> None:
    if "title" in data and not _is_non_empty_str(data["title"]):
        errors.append("Field 'title' must be a non-empty string")
    if "salary" in data and data["salary"] is not None and not _is_count(data["salary"]):
        errors.append("Field 'salary' must be a non-negative integer")
    if "equity" in data and data["equity"] is not None and not _is_equity(data["equity"]):
        errors.append("Field 'equity' must be a number between 0 and 1")


def validate_company_new(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    """
    errors: List[str] = []
    _check_unknown(data, ["handle"] + COMPANY_UPDATABLE, errors)

    for f in COMPANY_NEW_REQUIRED:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    handle = data.get("handle")
    if _is_non_empty_str(handle):
        if len(handle) > HANDLE_MAX_LENGTH:
            errors.append(f"Field 'handle' must be at most {HANDLE_MAX_LENGTH} characters")
        elif not HANDLE_RE.match(handle):
            errors.append("Field 'handle' must be lowercase letters, digits and dashes")

    _check_company_fields({k: v for k, v in data.items() if k not in COMPANY_NEW_REQUIRED}, errors)
    return errors


def validate_company_update(data: Dict[str, Any]) -> List[str]:
    errors: List[str] = []
    if not data:
        errors.append(f"At least one of {', '.join(COMPANY_UPDATABLE)} is required")
    _check_unknown(data, COMPANY_UPDATABLE, errors)
    _check_company_fields(data, errors)
    return errors


def validate_job_new(data: Dict[str, Any]) -> List[str]:
    errors: List[str] = []
    _check_unknown(data, JOB_NEW_REQUIRED + ["salary", "equity"], errors)

    for f in JOB_NEW_REQUIRED:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    _check_job_fields({k: v for k, v in data.items() if k != "title"}, errors)
    return errors


def validate_job_update(data: Dict[str, Any]) -> List[str]:
    errors: List[str] = []
    if not data:
        errors.append(f"At least one of {', '.join(JOB_UPDATABLE)} is required")
    _check_unknown(data, JOB_UPDATABLE, errors)
    _check_job_fields(data, errors)
    return errors


def ensure_valid(errors: List[str]) -> None:
    """Raise BadRequestError carrying every message if there are any."""
    if errors:
        raise BadRequestError("; ".join(errors))
