"""Flask application subclass carrying the service container."""

from flask import Flask

from app.services.container import ServiceContainer


class App(Flask):
    """Flask application with typed access to the DI container."""

    container: ServiceContainer
