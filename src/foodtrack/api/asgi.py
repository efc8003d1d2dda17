"""ASGI entrypoint for the meal tracking API."""

from foodtrack.api.app import create_app
from foodtrack.containers import build_container

app = create_app(build_container())
