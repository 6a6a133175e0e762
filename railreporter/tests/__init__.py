"""Test suite for railreporter.

Organized into three categories:

1. core/: Unit tests for core domain logic
   - No network, fast execution
   - Uses in-memory fakes for ports

2. adapters/: Tests for adapter implementations
   - TestRail API exercised through httpx.MockTransport
   - pytest host bridge driven with stand-in reports and items

3. fakes/: Port implementations for testing
   - In-memory implementations of CatalogPort and SubmissionPort
   - A sample catalog snapshot shared by the tests
"""
