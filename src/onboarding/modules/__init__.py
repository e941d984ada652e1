"""Feature modules with auto-discovery."""

import logging
from importlib import import_module
from pathlib import Path

from fastapi import APIRouter


logger = logging.getLogger(__name__)


def discover_modules() -> list[APIRouter]:
    """Collect the routers exposed by feature modules.

    Every package under ``onboarding.modules`` whose ``__init__`` exports a
    ``router`` is mounted; packages without one (e.g. ``users``) only
    contribute models.

    Returns:
        Routers in package-name order.
    """
    modules_dir = Path(__file__).parent
    routers: list[APIRouter] = []

    for path in sorted(modules_dir.iterdir()):
        if path.is_dir() and not path.name.startswith("_"):
            module = import_module(f"onboarding.modules.{path.name}")
            if hasattr(module, "router"):
                routers.append(module.router)
                logger.info("Loaded module: %s", path.name)

    return routers
