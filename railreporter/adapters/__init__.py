"""External adapters for railreporter.

This package contains all external dependencies (TestRail over HTTP,
the pytest host) and provides implementations of the core port
interfaces.

Adapter Organization:

- testrail/: Catalog fetch and result submission against TestRail
- host/: Test-execution hosts feeding lifecycle signals (pytest)
"""
