"""Fake implementations of core ports for testing.

These in-memory implementations allow core domain logic to be tested
without a TestRail instance:

- FakeCatalogPort: Returns a preset snapshot or fails
- FakeSubmissionPort: Captures runs and results, fails on demand
- FakeRail: Mock TestRail HTTP API for the real adapters
- sample_catalog: A small project used across the tests
"""

from .catalog import FakeCatalogPort, sample_catalog
from .rail import CATALOG_ROUTES, FakeRail
from .submission import FakeSubmissionPort

__all__ = [
    "CATALOG_ROUTES",
    "FakeCatalogPort",
    "FakeRail",
    "FakeSubmissionPort",
    "sample_catalog",
]
