"""API router aggregating all sub-routers."""

from fastapi import APIRouter

from app.api import reports

api_router = APIRouter()

api_router.include_router(reports.router, tags=["Reports"])
