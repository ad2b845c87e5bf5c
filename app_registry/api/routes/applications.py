# app_registry/api/routes/applications.py
"""Application lookup API routes."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from app_registry.api.schemas.application import (
    ApplicationSchema, BatchLookupRequest, EnvUrlResponse, FlushRequest
)
from app_registry.container import get_registry
from app_registry.core.errors import InvalidHostError, RegistryError
from app_registry.core.models import Application
from app_registry.core.registry import AppRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/apps", tags=["apps"])


def _to_schema(app: Application) -> ApplicationSchema:
    return ApplicationSchema.model_validate(app.to_dict())


def _found_or_404(app: Application, what: str) -> ApplicationSchema:
    if app is None:
        raise HTTPException(status_code=404, detail=f"Application not found: {what}")
    return _to_schema(app)


def _upstream_error(e: RegistryError) -> HTTPException:
    logger.error(f"[api] registry lookup failed: {e}")
    return HTTPException(status_code=502, detail=str(e))


@router.get("/by-name/{name}", response_model=ApplicationSchema)
def get_app_by_name(
    name: str,
    force_reload: bool = False,
    registry: AppRegistry = Depends(get_registry),
):
    """Get application by name."""
    try:
        app = registry.get_by_name(name, force_reload=force_reload)
    except RegistryError as e:
        raise _upstream_error(e)
    return _found_or_404(app, name)


@router.get("/by-domain/{host}", response_model=ApplicationSchema)
def get_app_by_domain(
    host: str,
    force_reload: bool = False,
    registry: AppRegistry = Depends(get_registry),
):
    """
    Get the application serving a host.

    The response carries the parsed domainName/subDomain of the host.
    """
    try:
        app = registry.get_by_domain(host, force_reload=force_reload)
    except InvalidHostError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RegistryError as e:
        raise _upstream_error(e)
    return _found_or_404(app, host)


@router.get("/by-registered-domain/{domain}", response_model=ApplicationSchema)
def get_app_by_registered_domain(
    domain: str,
    force_reload: bool = False,
    registry: AppRegistry = Depends(get_registry),
):
    """Get application through its domain ownership record."""
    try:
        app = registry.get_by_registered_domain(domain, force_reload=force_reload)
    except InvalidHostError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RegistryError as e:
        raise _upstream_error(e)
    return _found_or_404(app, domain)


@router.post("/batch", response_model=List[ApplicationSchema])
def batch_get_apps(
    request: BatchLookupRequest,
    registry: AppRegistry = Depends(get_registry),
):
    """Get several applications; unknown IDs are left out of the response."""
    try:
        apps = registry.batch_get_by_id(request.app_ids, force_reload=request.force_reload)
    except RegistryError as e:
        raise _upstream_error(e)
    return [_to_schema(app) for app in apps]


@router.post("/prime", response_model=ApplicationSchema)
def prime_app(
    request: ApplicationSchema,
    registry: AppRegistry = Depends(get_registry),
):
    """Normalize a freshly written application and load it into the cache."""
    app = Application.from_dict(request.model_dump(exclude_none=True))
    return _to_schema(registry.add(app))


@router.post("/flush", status_code=204)
def flush_app(
    request: FlushRequest,
    registry: AppRegistry = Depends(get_registry),
):
    """Drop an application's cache entries."""
    try:
        registry.flush_app(Application(app_id=request.app_id, name=request.name))
    except RegistryError as e:
        raise _upstream_error(e)


@router.get("/{app_id}", response_model=ApplicationSchema)
def get_app(
    app_id: str,
    force_reload: bool = False,
    registry: AppRegistry = Depends(get_registry),
):
    """Get application by ID."""
    try:
        app = registry.get_by_id(app_id, force_reload=force_reload)
    except RegistryError as e:
        raise _upstream_error(e)
    return _found_or_404(app, app_id)


@router.get("/{app_id}/urls/{environment}", response_model=EnvUrlResponse)
def get_env_url(
    app_id: str,
    environment: str,
    registry: AppRegistry = Depends(get_registry),
):
    """Get the URL of one environment of an application."""
    try:
        app = registry.get_by_id(app_id)
    except RegistryError as e:
        raise _upstream_error(e)
    if app is None:
        raise HTTPException(status_code=404, detail=f"Application not found: {app_id}")

    return EnvUrlResponse(
        app_id=app.app_id,
        environment=environment,
        url=registry.build_env_url(app, environment),
    )
