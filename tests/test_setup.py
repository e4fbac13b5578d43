"""Basic test to verify setup is working."""

import keeper_cascade.cascade
import keeper_cascade.cli
import keeper_cascade.engine


def test_basic_setup() -> None:
    """Test that basic Python functionality works."""
    assert True


def test_imports() -> None:
    """Test that we can import from the keeper_cascade package."""
    assert keeper_cascade.cascade.resolve_cascade is not None
    assert keeper_cascade.engine.LeagueSnapshot is not None
    assert keeper_cascade.cli.cli is not None
