"""
Conference lifecycle API endpoints.

Provides the organizer-facing lifecycle operations:
- Delete a conference and all of its dependent records
- Duplicate a conference into a new edition
- Refresh the conference dashboard on demand
- Download the conference dashboard as a JSON file

Design:
- Every endpoint is POST only; other methods get 405 from the router
- Checks run in a fixed order: bearer credential (401), conferenceId
  (400), conference existence (404), organizer membership (403), then
  payload validation (400/409), and only then any write
- Service calls that fan out over the store run in the threadpool so
  the event loop shared with the daily scheduler stays free
- Errors are returned as {"error": message}; unexpected failures return
  500 with a stable error code and no internal detail
"""

import json
import re
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, Request, status
from fastapi.responses import JSONResponse, Response
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError as PydanticValidationError

from conference_backend.src.config.settings import AppSettings, get_settings
from conference_backend.src.dependencies import get_credential_resolver, get_document_store
from conference_backend.src.schemas.dashboard import DashboardTrigger
from conference_backend.src.schemas.lifecycle import (
    ConferenceIdRequest,
    DuplicateConferenceRequest,
)
from conference_backend.src.services.authorization_service import (
    AuthorizationService,
    CredentialResolver,
)
from conference_backend.src.services.dashboard_service import DashboardService
from conference_backend.src.services.delete_service import DeleteService
from conference_backend.src.services.duplicate_service import DuplicateService
from conference_backend.src.services.exceptions import ServiceError, ValidationError
from conference_backend.src.services.platform_config_service import PlatformConfigService
from conference_backend.src.store.base import DocumentStore
from conference_backend.src.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(
    tags=["Conference lifecycle"],
)

DELETE_ERROR_CODE = "CONFERENCE_DELETE_ERROR"
DUPLICATE_ERROR_CODE = "CONFERENCE_DUPLICATE_ERROR"
DASHBOARD_REFRESH_ERROR_CODE = "CONFERENCE_DASHBOARD_REFRESH_ERROR"
DASHBOARD_DOWNLOAD_ERROR_CODE = "CONFERENCE_DASHBOARD_DOWNLOAD_ERROR"

_FILENAME_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


# ============================================================================
# Dependencies
# ============================================================================


def get_authorization_service(
    store: DocumentStore = Depends(get_document_store),
    resolver: CredentialResolver = Depends(get_credential_resolver),
) -> AuthorizationService:
    """Create AuthorizationService bound to the document store."""
    return AuthorizationService(store=store, resolver=resolver)


def get_delete_service(
    store: DocumentStore = Depends(get_document_store),
    settings: AppSettings = Depends(get_settings),
) -> DeleteService:
    """Create DeleteService with the configured batch limit."""
    return DeleteService(store, batch_limit=settings.batch_safe_limit)


def get_duplicate_service(
    store: DocumentStore = Depends(get_document_store),
    settings: AppSettings = Depends(get_settings),
) -> DuplicateService:
    """Create DuplicateService with the configured batch limit and platform config."""
    return DuplicateService(
        store,
        batch_limit=settings.batch_safe_limit,
        platform_config=PlatformConfigService(store, doc_id=settings.platform_config_doc_id),
    )


def get_dashboard_service(
    store: DocumentStore = Depends(get_document_store),
    settings: AppSettings = Depends(get_settings),
) -> DashboardService:
    """Create DashboardService in the platform timezone."""
    return DashboardService(store, timezone_name=settings.dashboard_schedule_timezone)


# ============================================================================
# Helpers
# ============================================================================


async def _read_json_object(request: Request) -> Dict[str, Any]:
    """
    Parse the request body as a JSON object.

    Raises:
        ValidationError: If the body is missing, not JSON, or not an object
    """
    try:
        body = await request.json()
    except ValueError:
        raise ValidationError("Invalid JSON body")
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def _error_response(
    operation: str,
    exc: Exception,
    code: str,
    fallback_message: str,
    conference_id: Optional[Any] = None,
    requester_email: Optional[str] = None,
) -> JSONResponse:
    """
    Log a failure with its context and reduce it to a short error body.

    ServiceErrors keep their status and message, except 500-class ones
    which, like any other exception, become a generic 500 with ``code``.
    """
    context = {
        "operation": operation,
        "conference_id": conference_id,
        "requester_email": requester_email,
        "error_type": type(exc).__name__,
        "error": str(exc),
    }

    if isinstance(exc, ServiceError) and exc.status_code < 500:
        logger.warning(f"{operation} rejected: {exc.message}", extra=context)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    logger.error(f"{operation} failed", extra=context, exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": fallback_message, "code": code},
    )


def dashboard_filename(conference_id: str) -> str:
    """Attachment filename of a downloaded dashboard."""
    return f"conference-dashboard-{_FILENAME_UNSAFE.sub('_', conference_id)}.json"


# ============================================================================
# API Endpoints
# ============================================================================


@router.post(
    "/deleteConference",
    summary="Delete a conference",
    description="Delete a conference and every record scoped to it (organizers only)",
)
async def delete_conference(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    auth_service: AuthorizationService = Depends(get_authorization_service),
    delete_service: DeleteService = Depends(get_delete_service),
):
    """
    Delete a conference.

    Request Body:
        {"conferenceId": "<id>"}

    Returns:
        200 {"report": {...per-collection counts..., "deletedAt": "..."}}

    Raises:
        400, 401, 403, 404, 500
    """
    requester_email = None
    conference_id = None
    try:
        requester_email = auth_service.authenticate(authorization)
        payload = ConferenceIdRequest.model_validate(await _read_json_object(request))
        conference_id = payload.conference_id
        context = auth_service.authorize_organizer(requester_email, conference_id)
        conference_id = context.conference_id

        report = await run_in_threadpool(
            delete_service.delete, conference_id, requester_email=requester_email
        )
        return {"report": report.model_dump(by_alias=True)}

    except Exception as e:
        return _error_response(
            "deleteConference", e, DELETE_ERROR_CODE, "Conference deletion failed",
            conference_id, requester_email,
        )


@router.post(
    "/duplicateConference",
    summary="Duplicate a conference",
    description="Create a new conference from an existing one (organizers only)",
)
async def duplicate_conference(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    auth_service: AuthorizationService = Depends(get_authorization_service),
    duplicate_service: DuplicateService = Depends(get_duplicate_service),
):
    """
    Duplicate a conference.

    Request Body:
        {
          "conferenceId": "<source id>",
          "name": "DevCon",
          "edition": 6,
          "startDate": "2025-03-01",
          "duplicateRooms": true,
          "duplicateTracks": true,
          "duplicatePlanningStructure": true,
          "duplicateActivities": true,
          "duplicateSponsors": false
        }

    Returns:
        200 {"report": {"newConferenceId": "...", "activitiesCreated": 3, "createdAt": "..."}}

    Raises:
        400 (invalid field, planning structure without rooms), 401, 403, 404,
        409 (name and edition already used), 500
    """
    requester_email = None
    conference_id = None
    try:
        requester_email = auth_service.authenticate(authorization)
        body = await _read_json_object(request)
        conference_id = ConferenceIdRequest.model_validate(body).conference_id
        context = auth_service.authorize_organizer(requester_email, conference_id)
        conference_id = context.conference_id

        try:
            payload = DuplicateConferenceRequest.model_validate(body)
        except PydanticValidationError:
            raise ValidationError("Invalid duplicate options")

        report = await run_in_threadpool(
            duplicate_service.duplicate,
            conference_id,
            payload,
            requester_email=requester_email,
            source_conference=context.conference,
        )
        return {"report": report.model_dump(by_alias=True)}

    except Exception as e:
        return _error_response(
            "duplicateConference", e, DUPLICATE_ERROR_CODE, "Conference duplication failed",
            conference_id, requester_email,
        )


@router.post(
    "/refreshConferenceDashboard",
    summary="Refresh the conference dashboard",
    description="Recompute and store the dashboard of a conference (organizers only)",
)
async def refresh_conference_dashboard(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    auth_service: AuthorizationService = Depends(get_authorization_service),
    dashboard_service: DashboardService = Depends(get_dashboard_service),
):
    """
    Refresh the dashboard of a conference.

    Returns:
        200 {"report": {"historyId": "...", "dashboard": {...}}}

    Raises:
        400, 401, 403, 404, 500
    """
    requester_email = None
    conference_id = None
    try:
        requester_email = auth_service.authenticate(authorization)
        payload = ConferenceIdRequest.model_validate(await _read_json_object(request))
        conference_id = payload.conference_id
        context = auth_service.authorize_organizer(requester_email, conference_id)
        conference_id = context.conference_id

        report = await run_in_threadpool(
            dashboard_service.recompute_and_persist,
            conference_id,
            DashboardTrigger.MANUAL_REFRESH,
            conference=context.conference,
        )
        logger.info(
            "Dashboard refreshed on demand",
            extra={"conference_id": conference_id, "requester_email": requester_email},
        )
        return {"report": report.model_dump(by_alias=True, mode="json")}

    except Exception as e:
        return _error_response(
            "refreshConferenceDashboard", e, DASHBOARD_REFRESH_ERROR_CODE,
            "Conference dashboard refresh failed", conference_id, requester_email,
        )


@router.post(
    "/downloadConferenceDashboard",
    summary="Download the conference dashboard",
    description="Download the dashboard of a conference as a JSON attachment (organizers only)",
)
async def download_conference_dashboard(
    request: Request,
    authorization: Optional[str] = Header(default=None),
    auth_service: AuthorizationService = Depends(get_authorization_service),
    dashboard_service: DashboardService = Depends(get_dashboard_service),
):
    """
    Download the stored dashboard, computing it first if it does not exist.

    Returns:
        200 application/json attachment named conference-dashboard-<conferenceId>.json
    """
    requester_email = None
    conference_id = None
    try:
        requester_email = auth_service.authenticate(authorization)
        payload = ConferenceIdRequest.model_validate(await _read_json_object(request))
        conference_id = payload.conference_id
        context = auth_service.authorize_organizer(requester_email, conference_id)
        conference_id = context.conference_id

        dashboard = await run_in_threadpool(dashboard_service.get_dashboard, conference_id)
        if dashboard is None:
            report = await run_in_threadpool(
                dashboard_service.recompute_and_persist,
                conference_id,
                DashboardTrigger.MANUAL_REFRESH,
                conference=context.conference,
            )
            dashboard = report.dashboard.to_document()

        return Response(
            content=json.dumps(dashboard, indent=2, ensure_ascii=False),
            media_type="application/json",
            headers={
                "Content-Disposition": f'attachment; filename="{dashboard_filename(conference_id)}"'
            },
        )

    except Exception as e:
        return _error_response(
            "downloadConferenceDashboard", e, DASHBOARD_DOWNLOAD_ERROR_CODE,
            "Conference dashboard download failed", conference_id, requester_email,
        )
