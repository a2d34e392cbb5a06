"""Route aggregation for the registrar web application."""

from fastapi import APIRouter

from . import grade, log

router = APIRouter()
router.include_router(grade.router)
router.include_router(log.router)
