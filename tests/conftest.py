"""pytest configuration and shared fixtures for wincmdlint tests."""

from pathlib import Path
from typing import Callable, Generator
import warnings

from hypothesis import HealthCheck, Verbosity, settings
import pytest

# Configure hypothesis settings globally
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
    verbosity=Verbosity.normal,
)

settings.register_profile(
    "ci",
    max_examples=200,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
    verbosity=Verbosity.verbose,
)

settings.register_profile(
    "dev",
    max_examples=20,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow],
    verbosity=Verbosity.normal,
)

# Load default profile
settings.load_profile("default")


@pytest.fixture(autouse=True)
def suppress_test_warnings() -> Generator[None, None, None]:
    """Suppress expected encoding warnings during tests.

    Tests that check for the warning use pytest.warns, which records it anyway.
    """
    warnings.filterwarnings(
        "ignore",
        message="File .* was read using .* encoding instead of UTF-8.*",
        category=UserWarning,
    )
    yield
    warnings.resetwarnings()


@pytest.fixture
def command_file(tmp_path: Path) -> Callable[..., str]:
    """Factory fixture that writes a command file and returns its path."""

    def _write(content: str, encoding: str = "utf-8") -> str:
        path = tmp_path / "commands.txt"
        path.write_bytes(content.encode(encoding))
        return str(path)

    return _write
