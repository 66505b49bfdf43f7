import os
from pathlib import Path
import nox

# Reuse existing virtualenvs for faster runs
nox.options.reuse_existing_virtualenvs = True
# Default sessions when running "nox"
nox.options.sessions = ["lint", "unit", "integration"]

TEST_DEPS = [".[test]"]

# Environment variables to propagate
PASSED_ENV_VARS = [
    "DATABASE_URL",
    "SECRET_KEY",
    "ADMIN_PASSWORD",
    "TIMEZONE",
    "LOG_LEVEL",
]


def _set_env(session):
    """
    Propagate configuration into the session and default the database to
    in-memory SQLite so tests never touch a real server.
    """
    session.env["PYTHONPATH"] = str(Path.cwd())
    session.env.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    for var in PASSED_ENV_VARS:
        if var in os.environ:
            session.env[var] = os.environ[var]


@nox.session(name="lint")
def lint(session):
    """
    Code formatting, linting, and type-checks:
      - isort
      - black
      - flake8
      - mypy
    """
    _set_env(session)
    session.install("isort", "black", "flake8", "mypy")
    session.run("isort", "--check", "meetpoll/", "tests/")
    session.run("black", "--check", "meetpoll/", "tests/")
    session.run("flake8", "meetpoll/", "tests/")
    session.run("mypy", "meetpoll/")


@nox.session(name="unit")
def unit(session):
    """
    Run unit tests for the scheduling engine, providers and helpers.
    Usage:
      nox -s unit
      nox -s unit -- tests/unit/test_state_machine.py
    """
    _set_env(session)
    session.install(*TEST_DEPS)
    tests = session.posargs or ["tests/unit"]
    session.run(
        "pytest",
        *tests,
        "-m", "unit",
        "-vv",
        "--tb=short",
        "--cov=meetpoll",
        "--cov-report=term-missing",
        "--cov-report=html:.nox/htmlcov",
        "--cov-report=xml",
    )


@nox.session(name="integration")
def integration(session):
    """
    Drive the FastAPI app end to end against in-memory SQLite.
    Usage:
      nox -s integration
      nox -s integration -- tests/integration/test_scheduling_flow.py
    """
    _set_env(session)
    session.install(*TEST_DEPS)
    tests = session.posargs or ["tests/integration"]
    session.run(
        "pytest",
        *tests,
        "-m", "integration",
        "-vv",
        "--tb=short",
    )
