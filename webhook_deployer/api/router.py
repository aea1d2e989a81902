"""Main API router."""

from fastapi import APIRouter

from webhook_deployer.api import deploy, health

router = APIRouter()

router.include_router(health.router, tags=["health"])
router.include_router(deploy.router, tags=["deploy"])
