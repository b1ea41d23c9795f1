from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from starlette.status import HTTP_204_NO_CONTENT

from studydeck.api.deps import ownership_store
from studydeck.api.routers.schemas import CardPatchRequest, CardResponse
from studydeck.auth.deps import get_principal
from studydeck.auth.models import Principal
from studydeck.services.ownership_store import OwnershipStore

router = APIRouter(prefix="/v1/cards", tags=["cards"])


@router.get("/{card_id}", response_model=CardResponse)
async def get_card(
    card_id: int,
    principal: Principal = Depends(get_principal),
    store: OwnershipStore = Depends(ownership_store),
) -> CardResponse:
    return CardResponse.model_validate(await store.get_card(card_id, principal))


@router.patch("/{card_id}", response_model=CardResponse)
async def update_card(
    card_id: int,
    body: CardPatchRequest,
    principal: Principal = Depends(get_principal),
    store: OwnershipStore = Depends(ownership_store),
) -> CardResponse:
    card = await store.update_card(card_id, principal, body.model_dump(exclude_unset=True))
    return CardResponse.model_validate(card)


@router.delete("/{card_id}", status_code=HTTP_204_NO_CONTENT)
async def delete_card(
    card_id: int,
    principal: Principal = Depends(get_principal),
    store: OwnershipStore = Depends(ownership_store),
) -> Response:
    await store.delete_card(card_id, principal)
    return Response(status_code=HTTP_204_NO_CONTENT)
