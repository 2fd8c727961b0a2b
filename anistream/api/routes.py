import time

from fastapi import APIRouter, Request

from anistream.config.settings import settings
from anistream.utils.http_client import http_client


# ===========================
# Router Instance
# ===========================
router = APIRouter()


# ===========================
# Service Endpoints
# ===========================
@router.get("/", summary="Home", description="Lists the mounted providers")
async def root(request: Request):
    return {
        "intro": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "providers": {
            "anime": [f"/anime/{name}" for name in request.app.state.providers],
        },
    }


@router.get("/health",
            summary="Health check",
            description="Checks the status of the server, the cache and the providers")
async def health(request: Request):
    start_time = time.time()

    health_status = {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "timestamp": int(time.time()),
        "checks": {}
    }

    health_status["checks"]["server"] = {
        "status": "ok",
        "message": "Server running"
    }

    cache = request.app.state.cache
    if cache is not None:
        try:
            await cache.ping()
            health_status["checks"]["cache"] = {
                "status": "ok",
                "message": f"Cache backend {cache.get_backend_name()} active"
            }
        except Exception as e:
            health_status["checks"]["cache"] = {
                "status": "error",
                "message": f"Cache error: {type(e).__name__}"
            }
            health_status["status"] = "degraded"
    else:
        health_status["checks"]["cache"] = {
            "status": "disabled",
            "message": "No cache configured"
        }

    for name, provider in request.app.state.providers.items():
        try:
            status_code, response_time = await http_client.timed_get(provider.base_url, timeout=settings.HEALTH_CHECK_TIMEOUT)
            if status_code == 200:
                health_status["checks"][name] = {
                    "status": "ok",
                    "message": f"{provider.get_provider_name()} accessible",
                    "response_time_ms": response_time
                }
            else:
                health_status["checks"][name] = {
                    "status": "error",
                    "message": f"{provider.get_provider_name()} HTTP {status_code}",
                    "response_time_ms": response_time
                }
                health_status["status"] = "degraded"
        except Exception as e:
            health_status["checks"][name] = {
                "status": "error",
                "message": f"{provider.get_provider_name()} unreachable: {type(e).__name__}"
            }
            health_status["status"] = "degraded"

    health_status["total_response_time_ms"] = round((time.time() - start_time) * 1000)

    return health_status
