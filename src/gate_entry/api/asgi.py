"""ASGI entrypoint for the gate entry API."""

from gate_entry.api.app import create_app
from gate_entry.containers import build_container

app = create_app(build_container())
