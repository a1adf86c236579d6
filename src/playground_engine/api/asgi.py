"""ASGI entrypoint for the playground engine API."""

from playground_engine.api.app import create_app
from playground_engine.containers import build_container

app = create_app(build_container())
