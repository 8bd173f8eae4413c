"""
Service routers.

One process can mount any subset of the services; peers reach each other
through their configured base URLs either way.
"""

import logging
from collections.abc import Iterable

from fastapi import APIRouter

from polyclinic.domains.clients.api import routes as clients
from polyclinic.domains.clinic.api import routes as clinic
from polyclinic.domains.employees.api import routes as employees
from polyclinic.domains.registrations.api import routes as registrations
from polyclinic.domains.results.api import routes as results

logger = logging.getLogger(__name__)

SERVICE_ROUTERS: dict[str, APIRouter] = {
    "clients": clients.router,
    "clinic": clinic.router,
    "employees": employees.router,
    "registrations": registrations.router,
    "results": results.router,
}


def build_api_router(services: Iterable[str]) -> APIRouter:
    """Router with the endpoints of every enabled service."""
    api_router = APIRouter()
    for name in services:
        api_router.include_router(SERVICE_ROUTERS[name])
        logger.info(f"Mounted {name} routes")
    return api_router
