import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from . import __version__
from .database import get_engine, init_database
from .env import Settings, load_env
from .errors import BadRequestError, JoblyError
from .filters import CompanySearch, JobSearch
from .logger import get_logger
from .retry import RetryError
from .repositories import CompanyRepository, JobRepository


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def _query_args(pairs: Dict[str, Optional[str]]) -> Dict[str, str]:
    """Keep only the filters the user actually passed."""
    return {k: v for k, v in pairs.items() if v is not None}


def _first_line(error: Exception) -> str:
    """SQLAlchemy messages carry the SQL and a help link after the first line."""
    return str(getattr(error, "orig", None) or error).splitlines()[0]


def parse_assignments(assignments: List[str]) -> Dict[str, Any]:
    """
    Turn ["name=Acme", "numEmployees=10"] into an ordered update mapping.

    Values are read as JSON when they parse (numbers, null, quoted strings),
    otherwise kept as plain strings.
    """
    data: Dict[str, Any] = {}
    for item in assignments:
        if "=" not in item:
            raise BadRequestError(f"Expected field=value, got: {item}")
        key, raw = item.split("=", 1)
        try:
            data[key.strip()] = json.loads(raw)
        except json.JSONDecodeError:
            data[key.strip()] = raw
    return data


def cmd_init_db(args: argparse.Namespace, settings: Settings) -> None:
    init_database(settings.database_url)
    print(f"Initialized database: {settings.database_url}")


def cmd_seed(args: argparse.Namespace, settings: Settings) -> None:
    input_path = Path(args.input)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        data = json.load(f)

    engine = init_database(settings.database_url)
    companies = CompanyRepository(engine)
    jobs = JobRepository(engine)

    created = skipped = 0
    for company in data.get("companies", []):
        try:
            companies.create(company)
            created += 1
        except (BadRequestError, IntegrityError) as e:
            print(f"[skip] company {company.get('handle')}: {_first_line(e)}")
            skipped += 1
    for job in data.get("jobs", []):
        try:
            jobs.create(job)
            created += 1
        except (BadRequestError, IntegrityError) as e:
            print(f"[skip] job {job.get('title')}: {_first_line(e)}")
            skipped += 1
    print(f"Done. created={created} skipped={skipped}")
    get_logger().log_metrics_summary()


def cmd_companies(args: argparse.Namespace, settings: Settings) -> None:
    repo = CompanyRepository(get_engine(settings.database_url))
    if args.action == "list":
        criteria = CompanySearch.from_query(_query_args({
            "name": args.name,
            "minEmployees": args.min_employees,
            "maxEmployees": args.max_employees,
        }))
        _print_json(repo.find_all(criteria))
    elif args.action == "get":
        _print_json(repo.get(args.handle))
    elif args.action == "update":
        _print_json(repo.update(args.handle, parse_assignments(args.set or [])))
    elif args.action == "delete":
        repo.remove(args.handle)
        print(f"Deleted: {args.handle}")


def cmd_jobs(args: argparse.Namespace, settings: Settings) -> None:
    repo = JobRepository(get_engine(settings.database_url))
    if args.action == "list":
        criteria = JobSearch.from_query(_query_args({
            "title": args.title,
            "minSalary": args.min_salary,
            "hasEquity": args.has_equity,
        }))
        _print_json(repo.find_all(criteria))
    elif args.action == "get":
        _print_json(repo.get(args.id))
    elif args.action == "update":
        _print_json(repo.update(args.id, parse_assignments(args.set or [])))
    elif args.action == "delete":
        repo.remove(args.id)
        print(f"Deleted: {args.id}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobly", description="Jobly companies and jobs")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--database-url", help="SQLAlchemy URL (default: DATABASE_URL env var)")

    subparsers = parser.add_subparsers(dest="command")

    init = subparsers.add_parser("init-db", help="Create the companies and jobs tables")
    init.set_defaults(func=cmd_init_db)

    seed = subparsers.add_parser("seed", help="Load companies and jobs from a JSON file")
    seed.add_argument("--input", required=True, help='JSON file: {"companies": [...], "jobs": [...]}')
    seed.set_defaults(func=cmd_seed)

    comp = subparsers.add_parser("companies", help="Query and edit companies")
    comp_actions = comp.add_subparsers(dest="action", required=True)
    comp_list = comp_actions.add_parser("list", help="List companies, optionally filtered")
    comp_list.add_argument("--name", help="Case-insensitive partial name match")
    comp_list.add_argument("--min-employees", help="Minimum number of employees")
    comp_list.add_argument("--max-employees", help="Maximum number of employees")
    for action in ("get", "update", "delete"):
        p = comp_actions.add_parser(action, help=f"{action.capitalize()} one company")
        p.add_argument("handle", help="Company handle")
        if action == "update":
            p.add_argument("--set", action="append", metavar="FIELD=VALUE",
                           help="Field to change (repeatable), e.g. numEmployees=120")
    comp.set_defaults(func=cmd_companies)

    jobs = subparsers.add_parser("jobs", help="Query and edit jobs")
    job_actions = jobs.add_subparsers(dest="action", required=True)
    job_list = job_actions.add_parser("list", help="List jobs, optionally filtered")
    job_list.add_argument("--title", help="Case-insensitive partial title match")
    job_list.add_argument("--min-salary", help="Minimum salary")
    job_list.add_argument("--has-equity", help="true to only list jobs offering equity")
    for action in ("get", "update", "delete"):
        p = job_actions.add_parser(action, help=f"{action.capitalize()} one job")
        p.add_argument("id", type=int, help="Job id")
        if action == "update":
            p.add_argument("--set", action="append", metavar="FIELD=VALUE",
                           help="Field to change (repeatable), e.g. salary=90000")
    jobs.set_defaults(func=cmd_jobs)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    # Load .env if present (DATABASE_URL, JOBLY_LOG_LEVEL, etc.)
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    settings = Settings.from_env()
    if args.database_url:
        settings = Settings(args.database_url, settings.log_level, settings.log_dir)
    get_logger(level=settings.log_level, log_dir=settings.log_dir)

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        args.func(args, settings)
    except JoblyError as e:
        print(f"Error ({e.status_code}): {e.message}", file=sys.stderr)
        raise SystemExit(2)
    except (SQLAlchemyError, RetryError) as e:
        get_logger().error("Database error", error=type(e).__name__)
        print(f"Database error: {_first_line(e)}", file=sys.stderr)
        raise SystemExit(2)


if __name__ == "__main__":
    main()
