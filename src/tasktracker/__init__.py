"""Multi-user task tracker: REST service and optimistic client."""

__version__ = "0.1.0"
