"""
Gestion commune des erreurs de validation.

Les erreurs de validation de requête (corps, query, path) sont renvoyées en 400
avec la liste des champs fautifs, au même format que les erreurs de validation
métier levées par les services.
"""
import logging
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

VALIDATION_ERROR_MESSAGE = "Erreur de validation"


def validation_detail(field: str, message: str) -> Dict[str, Any]:
    """Construit le corps `detail` d'une erreur de validation sur un champ."""
    return {"message": message, "errors": [{"field": field, "message": message}]}


def _format_request_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    errors = []
    for error in exc.errors():
        # loc = ("body", "quantity") ou ("query", "page")
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(location) or "body", "message": error.get("msg", "")})
    return errors


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = _format_request_errors(exc)
    logger.warning(f"[API] Requête invalide {request.method} {request.url.path}: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder({"detail": {"message": VALIDATION_ERROR_MESSAGE, "errors": errors}}),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
