import importlib
import pkgutil

from fastapi import APIRouter, FastAPI
from loguru import logger


def discover_routers(package_name: str = "app.api") -> list[APIRouter]:
    """
    Collect the module-level ``router`` of every module in a package.

    Args:
        package_name: The package to scan, one router module per resource.

    Returns:
        Routers in module-name order, so registration is deterministic.
    """
    package = importlib.import_module(package_name)
    package_path = getattr(package, "__path__", None)
    if not package_path:
        logger.warning(f"Cannot scan {package_name} for routers as it's not a package")
        return []

    routers: list[APIRouter] = []
    for module_info in sorted(pkgutil.iter_modules(package_path), key=lambda m: m.name):
        if module_info.ispkg:
            routers.extend(discover_routers(f"{package_name}.{module_info.name}"))
            continue

        module = importlib.import_module(f"{package_name}.{module_info.name}")
        router = getattr(module, "router", None)
        if isinstance(router, APIRouter):
            routers.append(router)
            logger.debug(f"Discovered router {router.prefix or '/'} in {module.__name__}")

    return routers


def register_routers(app: FastAPI, prefix: str = "/api") -> None:
    """Mount every discovered router under ``prefix``."""
    for router in discover_routers():
        app.include_router(router, prefix=prefix)
