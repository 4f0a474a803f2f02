"""Pytest configuration and fixtures for all tests."""

from pathlib import Path

import pytest

from airroute.navigation.navdata import DataTables, NavDatabase
from airroute.route.engine import RouteEngine

PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture
def sample_navdata_path() -> Path:
    """Path to the sample navigation data shipped with the project."""
    return PROJECT_ROOT / "data" / "navigation" / "sample.yaml"


@pytest.fixture
def navdb(sample_navdata_path: Path) -> NavDatabase:
    """Navigation database loaded with the KALB-KORD sample data."""
    db = NavDatabase()
    db.load_from_yaml(sample_navdata_path)
    return db


@pytest.fixture
def tables(navdb: NavDatabase) -> DataTables:
    """Immutable snapshot of the sample data."""
    return navdb.snapshot()


@pytest.fixture
def engine(tables: DataTables) -> RouteEngine:
    """Route engine over the sample data with default settings."""
    return RouteEngine(tables)
