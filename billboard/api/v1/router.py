"""API V1 Router"""

from fastapi import APIRouter

from billboard.api.v1.endpoints import bills, items

api_router = APIRouter()

api_router.include_router(bills.router, prefix="/shops/{shop_id}/bills", tags=["Bills"])
api_router.include_router(items.router, prefix="/shops/{shop_id}/items", tags=["Items"])
