from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Response, status

router = APIRouter()


@router.get("/api/health")
async def health() -> dict:
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@router.get(
    "/.well-known/appspecific/com.chrome.devtools.json", include_in_schema=False
)
async def chrome_devtools_manifest() -> Response:
    # Chrome DevTools requests this path on every page load.
    return Response(status_code=status.HTTP_204_NO_CONTENT)
