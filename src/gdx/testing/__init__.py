"""Fixture-based regression checking for GDX transforms."""

from .fixtures import FixtureCase, FixtureReport, FixtureResult, load_fixtures, run_fixtures

__all__ = [
    "FixtureCase",
    "FixtureReport",
    "FixtureResult",
    "load_fixtures",
    "run_fixtures",
]
