"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from rapid_responder.core.security import user_id_from_token
from rapid_responder.core.ws_manager import ws_manager
from rapid_responder.db.session import get_db
from rapid_responder.db.store import EventStore
from rapid_responder.services.dispatch_service import DispatchRouter
from rapid_responder.services.response_service import ResponseAggregator
from rapid_responder.services.sos_service import EventLifecycleManager
from rapid_responder.services.volunteer_registry import VolunteerRegistry

security = HTTPBearer(auto_error=False)


def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str:
    """Require a valid bearer token. Raises 401 if not authenticated."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    user_id = user_id_from_token(credentials.credentials)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id


def get_store(db: Annotated[Session, Depends(get_db)]) -> EventStore:
    return EventStore(db)


def get_registry(store: Annotated[EventStore, Depends(get_store)]) -> VolunteerRegistry:
    return VolunteerRegistry(store)


def get_dispatcher(
    store: Annotated[EventStore, Depends(get_store)],
    registry: Annotated[VolunteerRegistry, Depends(get_registry)],
) -> DispatchRouter:
    return DispatchRouter(store, registry, notifier=ws_manager)


def get_lifecycle(
    store: Annotated[EventStore, Depends(get_store)],
    dispatcher: Annotated[DispatchRouter, Depends(get_dispatcher)],
) -> EventLifecycleManager:
    return EventLifecycleManager(store, dispatcher)


def get_aggregator(
    store: Annotated[EventStore, Depends(get_store)],
    dispatcher: Annotated[DispatchRouter, Depends(get_dispatcher)],
) -> ResponseAggregator:
    return ResponseAggregator(store, dispatcher)
