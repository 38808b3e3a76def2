"""ASGI entrypoint for the life dashboard API."""

from life_dashboard.api.app import create_app
from life_dashboard.containers import build_container

app = create_app(build_container())
