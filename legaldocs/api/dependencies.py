from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request

from legaldocs.api.container import ServiceContainer


def get_container(request: Request) -> ServiceContainer:
    container: ServiceContainer = request.app.state.container
    return container


def get_owner_id(x_owner_id: Annotated[str | None, Header()] = None) -> str:
    """Owner identity supplied by the upstream authentication layer."""
    if not x_owner_id or not x_owner_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-Owner-Id header")
    return x_owner_id.strip()


Container = Annotated[ServiceContainer, Depends(get_container)]
OwnerId = Annotated[str, Depends(get_owner_id)]
