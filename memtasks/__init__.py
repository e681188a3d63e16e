"""In-memory task manager: background tasks, a service to run them and a JSON HTTP API."""

__version__ = "0.1.0"