"""Home (landing view) routes."""

from fastapi import APIRouter, Depends, HTTPException, status

from healthgest.auth import verify_api_key
from healthgest.schemas.home import HomeView
from healthgest.services.backend_client import BackendClient, BackendError, get_backend_client
from healthgest.services.home_summary import build_home_view, load_home_summary

router = APIRouter(tags=["home"])


@router.get("/home-summary")
async def get_home_summary(
    client: BackendClient = Depends(get_backend_client),
    _api_key: str = Depends(verify_api_key),
) -> HomeView:
    """Aggregate counts and delivery breakdown for the landing view.

    Raises:
        HTTPException: 502 with a user-facing message if the backend is
            unreachable or reports failure.
    """
    try:
        summary = await load_home_summary(client)
    except BackendError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.message)
    return build_home_view(summary)
