"""
Tests for the command line interface.
"""

import json

import pytest

from jobly import __version__
from jobly.app import main, parse_assignments
from jobly.errors import BadRequestError


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'cli.db'}"


@pytest.fixture
def seeded(db_url, tmp_path, sample_companies, sample_jobs, monkeypatch):
    """Database seeded through the CLI."""
    monkeypatch.chdir(tmp_path)
    seed_file = tmp_path / "seed.json"
    seed_file.write_text(json.dumps({"companies": sample_companies, "jobs": sample_jobs}))
    main(["--database-url", db_url, "seed", "--input", str(seed_file)])
    return db_url


def run_json(capsys, argv):
    capsys.readouterr()
    main(argv)
    return json.loads(capsys.readouterr().out)


class TestParseAssignments:

    def test_json_and_plain_values(self):
        data = parse_assignments(["numEmployees=12", "name=Acme Inc", "logoUrl=null"])
        assert data == {"numEmployees": 12, "name": "Acme Inc", "logoUrl": None}
        assert list(data) == ["numEmployees", "name", "logoUrl"]

    def test_missing_equals(self):
        with pytest.raises(BadRequestError):
            parse_assignments(["name"])


class TestCli:
    """Test CLI commands end to end on SQLite."""

    def test_version(self, capsys):
        main(["--version"])
        assert capsys.readouterr().out.strip() == __version__

    def test_seed(self, seeded, capsys):
        companies = run_json(capsys, ["--database-url", seeded, "companies", "list"])
        assert [c["handle"] for c in companies] == ["c1", "c2", "c3"]

    def test_seed_skips_duplicates(self, seeded, tmp_path, sample_companies, capsys):
        seed_file = tmp_path / "again.json"
        seed_file.write_text(json.dumps({"companies": sample_companies[:1]}))
        capsys.readouterr()

        main(["--database-url", seeded, "seed", "--input", str(seed_file)])

        out = capsys.readouterr().out
        assert "Duplicate company: c1" in out
        assert "created=0 skipped=1" in out

    def test_companies_list_filters(self, seeded, capsys):
        companies = run_json(
            capsys,
            ["--database-url", seeded, "companies", "list", "--min-employees", "2"],
        )
        assert [c["handle"] for c in companies] == ["c2", "c3"]

    def test_companies_list_min_above_max(self, seeded, capsys):
        with pytest.raises(SystemExit) as exc:
            main([
                "--database-url", seeded, "companies", "list",
                "--min-employees", "3", "--max-employees", "1",
            ])
        assert exc.value.code == 2
        assert "Minimum employees cannot exceed maximum employees." in capsys.readouterr().err

    def test_companies_update(self, seeded, capsys):
        company = run_json(
            capsys,
            ["--database-url", seeded, "companies", "update", "c1",
             "--set", "numEmployees=50", "--set", "name=Renamed"],
        )
        assert company["numEmployees"] == 50
        assert company["name"] == "Renamed"

    def test_companies_get_missing(self, seeded, capsys):
        with pytest.raises(SystemExit):
            main(["--database-url", seeded, "companies", "get", "nope"])
        assert "No company: nope" in capsys.readouterr().err

    def test_jobs_list_has_equity(self, seeded, capsys):
        jobs = run_json(
            capsys,
            ["--database-url", seeded, "jobs", "list", "--has-equity", "true"],
        )
        assert [j["title"] for j in jobs] == ["Job1", "Job2"]

    def test_jobs_update_and_delete(self, seeded, capsys):
        jobs = run_json(capsys, ["--database-url", seeded, "jobs", "list", "--title", "job3"])
        job_id = jobs[0]["id"]

        job = run_json(
            capsys,
            ["--database-url", seeded, "jobs", "update", str(job_id), "--set", "salary=5"],
        )
        assert job["salary"] == 5

        main(["--database-url", seeded, "jobs", "delete", str(job_id)])
        assert f"Deleted: {job_id}" in capsys.readouterr().out

    def test_seed_skips_duplicate_names(self, db_url, tmp_path, capsys):
        seed_file = tmp_path / "names.json"
        seed_file.write_text(json.dumps({"companies": [
            {"handle": "a1", "name": "Same", "numEmployees": 1, "description": "A1"},
            {"handle": "a2", "name": "Same", "numEmployees": 2, "description": "A2"},
            {"handle": "a3", "name": "Other", "numEmployees": 3, "description": "A3"},
        ]}))

        main(["--database-url", db_url, "seed", "--input", str(seed_file)])

        out = capsys.readouterr().out
        assert "[skip] company a2" in out
        assert "created=2 skipped=1" in out
        companies = run_json(capsys, ["--database-url", db_url, "companies", "list"])
        assert [c["handle"] for c in companies] == ["a3", "a1"]

    def test_database_error_exits_cleanly(self, seeded, capsys):
        capsys.readouterr()
        with pytest.raises(SystemExit) as exc:
            main(["--database-url", seeded, "companies", "update", "c1", "--set", "name=C2"])
        assert exc.value.code == 2
        err = capsys.readouterr().err
        assert err.startswith("Database error:")
        assert "UNIQUE" in err
        assert len(err.strip().splitlines()) == 1

    def test_seed_logs_metrics_summary(self, seeded, tmp_path):
        log_files = list((tmp_path / "logs").glob("jobly_*.log"))
        assert len(log_files) == 1
        content = log_files[0].read_text()
        assert "=== Query Metrics ===" in content
        assert "Statements:" in content
