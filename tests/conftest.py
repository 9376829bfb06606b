"""Pytest configuration and shared fixtures."""

import pytest
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tests.fixtures.test_inputs import (
    get_concrete_scenario_input,
    get_mixed_use_input,
)


@pytest.fixture
def concrete_input():
    """125 x 100 lot, all one-bedrooms, MLA 1000 (density-bound)."""
    return get_concrete_scenario_input()


@pytest.fixture
def concrete_input_low_mla():
    """Same lot with MLA 400, so packing stops on the minimum plate."""
    return get_concrete_scenario_input(min_lot_area_per_unit=400)


@pytest.fixture
def mixed_use_input():
    """Mixed-use project with retail, parking, and a two-source capital stack."""
    return get_mixed_use_input()
