from typing import Optional

from fastapi import APIRouter, Depends

from ..deps import Services, get_services
from ..schemas import MessageOut, SubscribeRequest

router = APIRouter(prefix="/api", tags=["subscribers"])


@router.post("/subscribe", response_model=MessageOut)
def subscribe(payload: Optional[SubscribeRequest] = None, services: Services = Depends(get_services)):
    # a missing body is a missing email, not a validation error
    services.subscribers.subscribe(payload.email if payload else None)
    return MessageOut(message="Subscribed successfully!")
