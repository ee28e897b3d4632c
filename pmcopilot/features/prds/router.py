"""
PRD API (feature router)

- CRUD over (:PRD) nodes
- RICE prioritization rows
- Markdown / HTML / CSV exports and share links
"""

from __future__ import annotations

from fastapi import APIRouter

from .routes.prd_crud import router as prd_crud_router
from .routes.prd_export import router as prd_export_router

router = APIRouter(tags=["prds"])

router.include_router(prd_export_router)
router.include_router(prd_crud_router)
