"""
Health endpoints
"""

from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from teamfinder.api.dependencies import get_container
from teamfinder.container import ServiceContainer
from teamfinder.core.logger import logger

router = APIRouter()


@router.get("/health")
def health_check(container: ServiceContainer = Depends(get_container)):
    """Liveness: the process is serving requests, whatever the state of its dependencies"""
    return {
        "status": "healthy",
        "service": container.config.service_name,
        "role": container.role,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": container.config.service_version,
    }


async def perform_health_checks(container: ServiceContainer) -> List[Dict[str, Any]]:
    checks: List[Dict[str, Any]] = []

    if container.mongo is not None:
        healthy = await container.mongo.ping()
        checks.append({"name": "mongodb", "status": "healthy" if healthy else "unhealthy"})

    if container.publisher is not None:
        checks.append({
            "name": "publisher",
            "status": "healthy" if container.publisher.is_healthy() else "degraded",
            "exchange": container.publisher.exchange_name,
        })

    for consumer in container.consumers:
        checks.append({
            "name": f"consumer:{consumer.queue_name}",
            "status": "healthy" if consumer.is_healthy() else "unhealthy",
            **consumer.get_stats(),
        })

    if container.connections is not None:
        checks.append({"name": "websocket", "status": "healthy", **container.connections.get_stats()})

    return checks


@router.get("/health/ready")
async def readiness_check(container: ServiceContainer = Depends(get_container)):
    """
    Readiness: the store must be reachable. A degraded publisher or a disabled
    consumer is reported but does not make the service unready.
    """
    checks = await perform_health_checks(container)
    failed = [c for c in checks if c["name"] == "mongodb" and c["status"] != "healthy"]
    body = {
        "status": "ready" if not failed else "not ready",
        "service": container.config.service_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": checks,
    }
    if failed:
        logger.warning(
            "Readiness check failed",
            metadata={"event": "readiness_check_failed", "failed_checks": [c["name"] for c in failed]},
        )
        return JSONResponse(status_code=503, content=body)
    return body
