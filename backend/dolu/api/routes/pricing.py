"""
Public Pricing Routes: add-ons, item categories and price quotes
"""
from fastapi import APIRouter, Depends
from typing import List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dolu.db.database import get_db
from dolu.models.pricing import Addon, ItemCategory
from dolu.schemas import AddonResponse, ItemCategoryResponse, QuoteRequest, QuoteResponse
from dolu.services import pricing
from dolu.services.pricing import PriceQuote

router = APIRouter()


def quote_response(price_quote: PriceQuote) -> QuoteResponse:
    return QuoteResponse(
        success=price_quote.success,
        base_price=price_quote.base_price,
        addons_price=price_quote.addons_price,
        total_price=price_quote.total_price,
        eta_text=price_quote.eta_text,
        addon_codes=list(price_quote.addon_codes),
        error=price_quote.error.value if price_quote.error else None,
        message=price_quote.error.message if price_quote.error else None,
    )


@router.get("/pricing/addons", response_model=List[AddonResponse])
async def list_addons(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Addon).where(Addon.active.is_(True)).order_by(Addon.fee, Addon.name))
    return result.scalars().all()


@router.get("/item-categories", response_model=List[ItemCategoryResponse])
async def list_item_categories(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(ItemCategory).where(ItemCategory.active.is_(True)).order_by(ItemCategory.name)
    )
    return result.scalars().all()


@router.post("/quotes", response_model=QuoteResponse)
async def get_quote(request: QuoteRequest, db: AsyncSession = Depends(get_db)):
    """
    Price a route. An unpriceable route is a normal answer (success=false
    with an error code), not an HTTP error.
    """
    price_quote = await pricing.quote(
        db, request.pickup_area_id, request.dropoff_area_id, request.addon_codes,
    )
    return quote_response(price_quote)
