from fastapi import APIRouter
from app.api.routes import imports, health

api_router = APIRouter()

# Include all route modules
api_router.include_router(health.router)
api_router.include_router(imports.router)
