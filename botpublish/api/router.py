from fastapi import APIRouter

from botpublish.api.publish import router as publish_router

api_router = APIRouter()

# API routes at /api/*
api_router.include_router(publish_router, prefix="/api", tags=["publish"])
