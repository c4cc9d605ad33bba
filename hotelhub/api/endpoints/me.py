from fastapi import APIRouter, Depends

from hotelhub.schemas.account import MeOut
from hotelhub.services.auth import Actor, get_actor

router = APIRouter()

@router.get("/me", response_model=MeOut)
async def me(actor: Actor = Depends(get_actor)) -> MeOut:
    return MeOut(
        account_id=actor.account_id,
        username=actor.username,
        display_name=actor.display_name,
        role=actor.role,
        api_key_id=actor.api_key_id,
    )
