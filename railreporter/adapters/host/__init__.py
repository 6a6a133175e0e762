"""Test-execution host adapters.

Hosts translate their own lifecycle callbacks into LifecyclePort
signals:
- pytest_plugin: pytest hooks, markers and a ``testrail`` fixture
"""
