"""Maintenance routes package — assembles all sub-routers."""

from fastapi import APIRouter
from .schedules import router as schedules_router
from .completions import router as completions_router
from .calendar import router as calendar_router
from .exports import router as exports_router

router = APIRouter()
router.include_router(schedules_router)
router.include_router(completions_router)
router.include_router(calendar_router)
router.include_router(exports_router)
