"""
Shared test configuration for gcli.

Unit tests (tests/unit) run against an isolated config directory and mocked
Google APIs. Integration tests (tests/integration) talk to a real account and
are marked with @pytest.mark.integration; deselect them with
`pytest -m "not integration"`.
"""


# Session-level marker definitions
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (needs a real account)"
    )
