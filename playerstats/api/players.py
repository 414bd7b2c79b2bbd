from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from playerstats.db.database import get_db
from playerstats.schemas.players import PlayerCreate, PlayerCreated, PlayerSummary, PlayerUpdate
from playerstats.schemas.settings import MessageResponse
from playerstats.services.player_service import PlayerService

players_router = APIRouter()


@players_router.post("/player", response_model=PlayerCreated)
async def create_player(payload: PlayerCreate, db: AsyncSession = Depends(get_db)):
    service = PlayerService(db)
    player = await service.create_player(payload)
    return PlayerCreated(
        player_id=player.id,
        shortcode=player.shortcode,
        options=player.options,
        videos=player.videos,
        players=await service.list_players(),
    )


@players_router.get("/players", response_model=List[PlayerSummary])
async def list_players(db: AsyncSession = Depends(get_db)):
    return await PlayerService(db).list_players()


@players_router.get("/options/player/{player_id}")
async def get_player_options(player_id: int, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    return await PlayerService(db).get_options(player_id)


@players_router.get("/option/player/{player_id}/{option}")
async def get_player_option(player_id: int, option: str, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    return await PlayerService(db).get_option(player_id, option)


@players_router.put("/options/player/{player_id}")
async def update_player_options(
    player_id: int,
    payload: PlayerUpdate,
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    return await PlayerService(db).update_player(player_id, payload)


@players_router.delete("/player/{player_id}", response_model=MessageResponse)
async def delete_player(player_id: int, db: AsyncSession = Depends(get_db)):
    await PlayerService(db).delete_player(player_id)
    return MessageResponse(message="The player has been successfully deleted")
