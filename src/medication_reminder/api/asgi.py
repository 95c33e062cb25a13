"""ASGI entrypoint for the medication reminder API."""

from medication_reminder.api.app import create_app
from medication_reminder.containers import build_container

app = create_app(build_container())
