"""Pytest configuration for conformance tests."""

import pytest
from tests.conformance.runners.cli_runner import CliRunner
from tests.conformance.runners.compiler_runner import CompilerRunner


def get_available_runners():
    """Return list of available conformance runners."""
    runners = [CompilerRunner(), CliRunner()]
    return runners


@pytest.fixture(params=get_available_runners(), ids=lambda r: r.name)
def runner(request):
    """Provide conformance runner for testing.

    This fixture is parametrized to run tests against all available runners.
    Currently includes:
    - compiler: calls reverlib.compiler.compile_source directly
    - cli: writes the case to a file and runs reverc in-process
    """
    return request.param
