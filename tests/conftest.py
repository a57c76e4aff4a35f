"""Root conftest for all tests - sys.path setup and shared ledger fixtures."""

import sys
from pathlib import Path

import pytest

# Make the src/ layout importable without an installed distribution
project_root = Path(__file__).parent.parent
src_root = project_root / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_ledger_path() -> Path:
    """YAML ledger with the Mainland/Hongkong sample portfolios."""
    return FIXTURES_DIR / "sample_ledger.yaml"
