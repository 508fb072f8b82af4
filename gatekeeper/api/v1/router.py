from fastapi import APIRouter
from gatekeeper.api.v1.endpoints import biometrics, entries, persons, search, topology


api_router = APIRouter()

api_router.include_router(persons.router, prefix="/persons", tags=["persons"])
api_router.include_router(biometrics.router, prefix="/biometrics", tags=["biometrics"])
api_router.include_router(entries.router, prefix="/entries", tags=["entries"])
api_router.include_router(search.router, prefix="/search", tags=["search"])
api_router.include_router(topology.router, prefix="/topology", tags=["topology"])
