from collections.abc import Generator

import pytest

from sqlsampler.config import reset_global_config
from sqlsampler.core.cache import reset_statement_cache


@pytest.fixture(autouse=True)
def reset_sampler_state(monkeypatch: pytest.MonkeyPatch) -> "Generator[None, None, None]":
    """Isolate tests from process-wide configuration and cached statements."""
    for name in (
        "SQLSAMPLER_NULL_MARKER",
        "SQLSAMPLER_MAX_OPEN_PREPARED_STATEMENTS",
        "SQLSAMPLER_PARAMETER_STYLE",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_global_config()
    reset_statement_cache()
    yield
    reset_statement_cache()
    reset_global_config()
