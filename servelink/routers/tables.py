"""
Restaurant tables and their QR codes.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from servelink import crud
from servelink.core.config import get_settings
from servelink.database import get_db
from servelink.dependencies import get_current_restaurant, get_owned_restaurant
from servelink.models import Restaurant
from servelink.schemas import MessageResponse, TableCreate, TableResponse
from servelink.services.qr import decode_data_url, table_qr_code

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tables", tags=["Tables"])


@router.get("", response_model=List[TableResponse])
async def list_tables(
    restaurant: Restaurant = Depends(get_current_restaurant),
    db: AsyncSession = Depends(get_db),
):
    return await crud.tables.get_all(
        db, filters={"restaurant_id": restaurant.id}, order_by="table_number"
    )


@router.post("", response_model=TableResponse, status_code=status.HTTP_201_CREATED)
async def create_table(
    payload: TableCreate,
    restaurant: Restaurant = Depends(get_owned_restaurant),
    db: AsyncSession = Depends(get_db),
):
    """Add a table; its QR code is generated here and stored on the row."""
    capacity = payload.capacity or get_settings().default_table_capacity
    return await crud.tables.create(
        db,
        {
            "restaurant_id": restaurant.id,
            "table_number": payload.table_number,
            "capacity": capacity,
            "qr_code": table_qr_code(restaurant.id, payload.table_number),
        },
    )


@router.delete("/{table_id}", response_model=MessageResponse)
async def delete_table(
    table_id: str,
    restaurant: Restaurant = Depends(get_owned_restaurant),
    db: AsyncSession = Depends(get_db),
):
    table = await crud.tables.get(db, table_id, restaurant_id=restaurant.id)
    await crud.tables.remove(db, table)
    return MessageResponse(message=f"Table {table.table_number} deleted")


@router.get("/{table_id}/qr.png", response_class=Response)
async def download_qr(
    table_id: str,
    restaurant: Restaurant = Depends(get_current_restaurant),
    db: AsyncSession = Depends(get_db),
) -> Response:
    table = await crud.tables.get(db, table_id, restaurant_id=restaurant.id)
    if not table.qr_code:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Table has no QR code")
    return Response(
        content=decode_data_url(table.qr_code),
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="table-{table.table_number}-qr.png"'},
    )
