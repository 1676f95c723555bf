"""API routers for the membership dues service."""

from memberdues.routers import auth, dashboard, members, notifications, payments  # noqa: F401
