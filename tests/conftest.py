"""
Pytest configuration and fixtures for Switchboard tests.
"""

import sys
from pathlib import Path

import pytest

# Add the repository root to path for imports
# This allows `from switchboard.orchestration import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))


@pytest.fixture
def sample_audio_bytes():
    """Sample audio bytes for testing."""
    return b"fake audio data for testing"


@pytest.fixture
def sample_text():
    """Eight words of input text for rewrite tests."""
    return "The quick brown fox jumps over lazy dogs"


@pytest.fixture
def sample_detect_text():
    """Text long enough for AI detection."""
    return (
        "Large language models produce fluent prose with remarkably even sentence "
        "lengths and predictable transitions between ideas."
    )


@pytest.fixture(autouse=True)
def reset_app_state():
    """Drop cached settings and service singletons between tests."""
    from switchboard.app.dependencies import reset_dependencies

    reset_dependencies()
    yield
    reset_dependencies()
