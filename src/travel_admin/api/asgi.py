"""ASGI entrypoint for the travel admin dashboard server."""

from travel_admin.api.app import create_app
from travel_admin.containers import build_container

app = create_app(build_container())
