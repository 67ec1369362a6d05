import os

import pytest

# Must be set before src.core.config is first imported.
os.environ.setdefault("RESOLVER_LOG_TO_FILE", "false")

LIVE_API_FLAG = "--live-api"


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        LIVE_API_FLAG,
        action="store_true",
        default=False,
        help="Also run tests/e2e against the catalog API at RESOLVER_API_URL.",
    )


def pytest_configure(config: pytest.Config) -> None:
    for marker in (
        "e2e: needs a reachable catalog API",
        "property: hypothesis-driven property tests",
    ):
        config.addinivalue_line("markers", marker)


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    live = config.getoption(LIVE_API_FLAG)
    offline = pytest.mark.skip(reason=f"needs the catalog API; rerun with {LIVE_API_FLAG}")
    for item in items:
        if "tests/e2e/" not in item.nodeid:
            continue
        item.add_marker("e2e")
        if not live:
            item.add_marker(offline)
