from fastapi import APIRouter

from holdaspot.api.v1.endpoints import credits, facilities, reservations, sports, users

api_router = APIRouter()

api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(sports.router, prefix="/sports", tags=["facilities"])
api_router.include_router(facilities.router, prefix="/facilities", tags=["facilities"])
api_router.include_router(reservations.router, prefix="/reservations", tags=["reservations"])
api_router.include_router(credits.router, prefix="/credits", tags=["credits"])
