"""Cassius notification preference test suite

Test organization:
- unit/: Unit tests for individual modules
  - preferences/: Catalog, resolution, mutations and the preference store
  - delivery/: Digest scheduling and dispatcher planning

Running tests:
    # All tests
    pytest

    # Specific module
    pytest tests/unit/preferences/
"""
