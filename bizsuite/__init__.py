"""BizSuite portal client: REST resource clients, query cache and a mock API."""

__version__ = "0.1.0"
