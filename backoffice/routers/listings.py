# backoffice/routers/listings.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from backoffice.deps import get_mls
from backoffice.mls.client import MLSClient
from backoffice.models import ErrorResponse, ListingPage, ListingQueryParams

router = APIRouter(tags=["listings"])

_ERRORS = {500: {"model": ErrorResponse}}

@router.get("/listings", response_model=ListingPage, responses=_ERRORS)
async def list_listings(
    # everything is optional and taken as sent; unusable values impose no constraint
    page: Optional[str]          = Query(None, description="1-based page; anything invalid means 1"),
    search: Optional[str]        = Query(None, description="Words matched against address, city, province, postal code, type"),
    price_min: Optional[str]     = Query(None, alias="priceMin"),
    price_max: Optional[str]     = Query(None, alias="priceMax", description="'any' or >= 1,000,000 means unbounded"),
    beds: Optional[str]          = Query(None, description="Minimum bedrooms, or 'any'"),
    baths: Optional[str]         = Query(None, description="Minimum bathrooms, or 'any'"),
    property_type: Optional[str] = Query(None, alias="propertyType"),
    status: Optional[str]        = Query(None),
    sort: Optional[str]          = Query(None, description="price_desc, price_asc, newest, popular"),

    mls: MLSClient = Depends(get_mls),
):
    """
    Thin endpoint:
      - collect the raw parameters
      - let the MLS client translate and fetch
      - upstream failures surface through the MLSError handler
    """
    params = ListingQueryParams(
        page=page,
        search=search,
        price_min=price_min,
        price_max=price_max,
        beds=beds,
        baths=baths,
        property_type=property_type,
        status=status,
        sort=sort,
    )
    return await mls.search(params)

@router.get("/listings/{listing_key}", response_model=None, responses=_ERRORS)
async def get_listing(listing_key: str, mls: MLSClient = Depends(get_mls)):
    # raw upstream body, whatever its JSON type
    return JSONResponse(await mls.get(listing_key))
