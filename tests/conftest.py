"""Global pytest configuration."""

pytest_plugins = ["tests.fixtures.archive"]
