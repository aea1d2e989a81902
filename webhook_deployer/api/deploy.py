"""Webhook endpoint that triggers deployments."""

import json
import secrets
from typing import Annotated, Any

from fastapi import APIRouter, Header, Request

from webhook_deployer.api.deps import (
    ClientAddressDep,
    PipelineDep,
    RateLimiterDep,
    RegistryDep,
    RequestIdDep,
    SettingsDep,
)
from webhook_deployer.core.exceptions import (
    PayloadInvalidError,
    ProjectNotFoundError,
    SignatureInvalidError,
)
from webhook_deployer.core.signature import verify_signature
from webhook_deployer.models.project import DeploymentRequest
from webhook_deployer.models.responses import (
    DeploymentErrorResponse,
    DeployResponse,
    ErrorResponse,
)
from webhook_deployer.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


def parse_ref(body: bytes) -> str | None:
    """Extract ``ref`` from a signed JSON push payload."""
    if not body.strip():
        return None
    try:
        payload: Any = json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise PayloadInvalidError(f"body is not JSON: {e}") from e
    if not isinstance(payload, dict):
        raise PayloadInvalidError("body must be a JSON object")
    ref = payload.get("ref")
    if ref is not None and not isinstance(ref, str):
        raise PayloadInvalidError("'ref' must be a string")
    return ref or None


@router.post(
    "/deploy/{project_name}",
    response_model=DeployResponse,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": DeploymentErrorResponse},
    },
)
async def deploy_project(
    project_name: str,
    request: Request,
    settings: SettingsDep,
    registry: RegistryDep,
    pipeline: PipelineDep,
    rate_limiter: RateLimiterDep,
    request_id: RequestIdDep,
    client: ClientAddressDep,
    x_hub_signature_256: Annotated[str | None, Header()] = None,
) -> DeployResponse:
    """Verify a push notification and deploy the project it names.

    Checks run in order: rate limit, project lookup, signature, branch filter.
    Pushes to other branches are acknowledged without deploying.
    """
    rate_limiter.check(client)

    # Signature is computed over the bytes exactly as received
    body = await request.body()

    project = registry.get(project_name)
    if project is None:
        if settings.hide_unknown_projects:
            # Same work as a real check so unknown names are indistinguishable
            verify_signature(body, x_hub_signature_256, secrets.token_bytes(32))
            logger.warning("deploy.signature_invalid", project=project_name)
            raise SignatureInvalidError(project_name)
        logger.warning("deploy.project_not_found", project=project_name)
        raise ProjectNotFoundError(project_name)

    if not verify_signature(body, x_hub_signature_256, project.secret):
        logger.warning("deploy.signature_invalid", project=project_name)
        raise SignatureInvalidError(project_name)

    deployment = DeploymentRequest(
        project_name=project_name,
        body=body,
        signature=x_hub_signature_256,
        ref=parse_ref(body),
        request_id=request_id,
    )

    branch = deployment.branch or project.branch
    if branch != project.branch:
        logger.info(
            "deploy.branch_ignored",
            project=project_name,
            branch=branch,
            target_branch=project.branch,
        )
        return DeployResponse(
            message=f"Ignoring deployment: branch {branch} != {project.branch}",
        )

    result = await pipeline.deploy(project, branch, request_id=deployment.request_id)
    return DeployResponse(message=result.message)
