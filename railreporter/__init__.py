"""railreporter: track test-case results and report them to TestRail."""

__version__ = "0.1.0"
