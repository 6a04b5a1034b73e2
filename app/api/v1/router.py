from fastapi import APIRouter

from app.api.v1.endpoints import admin, auth, awards, courses, modules, progress, roadmap, users

api_router = APIRouter()
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(users.router, tags=["users"])
api_router.include_router(roadmap.router, prefix="/roadmaps", tags=["roadmaps"])
api_router.include_router(modules.router, tags=["modules"])
api_router.include_router(courses.router, prefix="/courses", tags=["courses"])
api_router.include_router(progress.router, tags=["progress"])
api_router.include_router(awards.router, tags=["awards"])
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])
