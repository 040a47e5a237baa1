"""Record-store endpoint: club vestiaire operations backed by Airtable."""

import logging
from typing import Any, Dict, Optional, Type

import httpx
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ValidationError
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import Settings, get_settings
from app.models.order_request import CreateDemandeRequest, CreateOrderRequest
from app.routers.cors import (
    CORS_HEADERS_WITH_METHODS,
    InvalidRequest,
    SERVER_ERROR,
    json_response,
    preflight_response,
)
from app.services import vestiaire
from app.services.airtable_client import AirtableClient, AirtableError

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter()


def _respond(content: Any, status_code: int = 200):
    return json_response(content, status_code=status_code, headers=CORS_HEADERS_WITH_METHODS)


def _require(params: Dict[str, Any], name: str) -> str:
    value = params.get(name)
    if not value:
        raise InvalidRequest(f"Paramètre manquant: {name}")
    return value


@router.options("/airtable-api", include_in_schema=False)
async def airtable_preflight():
    return preflight_response(CORS_HEADERS_WITH_METHODS)


@router.get("/airtable-api", summary="Read club, catalogue, orders and requests")
@limiter.limit("120/minute")
async def airtable_read(request: Request, settings: Settings = Depends(get_settings)):
    params = dict(request.query_params)
    action = params.get("action")
    logger.info("Airtable GET received", extra={"action": action})
    return await _run(_dispatch_get, action, settings, params)


@router.post("/airtable-api", summary="Create orders and requests")
@limiter.limit("20/minute")
async def airtable_write(request: Request, settings: Settings = Depends(get_settings)):
    try:
        payload = await request.json()
    except ValueError:
        logger.warning("Rejected Airtable POST: body is not JSON")
        return _respond({"error": "Corps de requête invalide"}, status_code=400)
    if not isinstance(payload, dict):
        return _respond({"error": "Corps de requête invalide"}, status_code=400)

    action = payload.get("action")
    logger.info("Airtable POST received", extra={"action": action})
    return await _run(_dispatch_post, action, settings, payload)


async def _run(dispatch, action: Optional[str], settings: Settings, data: Dict[str, Any]):
    """Run *dispatch* with a fresh Airtable client and turn failures into JSON errors."""
    try:
        async with AirtableClient(settings) as airtable:
            result = await dispatch(airtable, settings, action, data)
    except InvalidRequest as exc:
        logger.warning("Rejected Airtable request: %s", exc)
        return _respond(exc.to_content(), status_code=400)
    except (httpx.HTTPError, AirtableError) as exc:
        logger.error("Airtable error for action %s: %s", action, exc)
        return _respond({"error": SERVER_ERROR, "details": str(exc)}, status_code=500)
    return _respond(result)


async def _dispatch_get(
    airtable: AirtableClient, settings: Settings, action: Optional[str], params: Dict[str, Any]
) -> Dict[str, Any]:
    if action == "getClub":
        return await vestiaire.get_club(airtable, settings, _require(params, "email"))
    if action == "getCatalogue":
        return await vestiaire.get_catalogue(airtable, settings, _require(params, "clubNom"))
    if action == "getOrders":
        return await vestiaire.get_orders(airtable, settings, _require(params, "clubId"))
    if action == "getDemandes":
        return await vestiaire.get_demandes(airtable, settings, _require(params, "clubId"))
    raise InvalidRequest(f"Action inconnue: {action}")


async def _dispatch_post(
    airtable: AirtableClient, settings: Settings, action: Optional[str], payload: Dict[str, Any]
) -> Dict[str, Any]:
    if action == "createOrder":
        order = _validate(CreateOrderRequest, payload)
        return await vestiaire.create_order(airtable, settings, order)
    if action == "createDemande":
        demande = _validate(CreateDemandeRequest, payload)
        return await vestiaire.create_demande(airtable, settings, demande)
    raise InvalidRequest(f"Action POST inconnue: {action}")


def _validate(model: Type[BaseModel], payload: Dict[str, Any]) -> Any:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise InvalidRequest("Données invalides", details=exc.json(include_url=False)) from exc
