"""Server-side FastAPI application for the task tracker."""
