import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13"]


def _install(session: nox.Session) -> None:
    """Install the project with the test extra into the nox virtualenv."""
    session.install("-e", ".[test]")


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run the full test suite across Python versions."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Run domain-layer tests only (no infrastructure required)."""
    _install(session)
    session.run("pytest", "tests/aftersales/domain/", *session.posargs)


@nox.session(python=PYTHON_VERSIONS[-1])
def loadtest(session: nox.Session) -> None:
    """Headless smoke run against a server on localhost:8000."""
    session.install("-e", ".[loadtest]")
    session.run(
        "locust",
        "-f",
        "loadtests/locustfile.py",
        "--headless",
        "-u",
        "10",
        "-r",
        "2",
        "-t",
        "60s",
        "--host",
        "http://localhost:8000",
    )
