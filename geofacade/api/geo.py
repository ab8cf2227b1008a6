from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ..context import GeoContext
from ..geo import Geo
from ..providers import get_provider
from ..schemas.geo import GeoFieldResponse, GeoLocationResponse

router = APIRouter(tags=["geo"])


def get_geo(request: Request) -> Geo:
    """Geo bound to the context the middleware created for this request"""
    context = getattr(request.state, "geo_context", None)
    if context is None:
        context = GeoContext(peer_addr=request.client.host if request.client else None)
    return Geo(get_provider(), context)


def _accessor_name(name: str) -> str:
    if name.startswith(("_", "get_")):
        return name
    return f"get_{name}"


@router.get("/geo", response_model=GeoLocationResponse)
def lookup_caller(ip: Optional[str] = Query(None), geo: Geo = Depends(get_geo)):
    """Location of the caller, or of ?ip= when given"""
    if ip:
        geo.set_ip(ip)
    return GeoLocationResponse(**geo.get_all())


@router.get("/geo/fields/{name}", response_model=GeoFieldResponse)
def lookup_field(
    name: str,
    ip: Optional[str] = Query(None),
    alpha: Optional[int] = Query(None, description="Country code length for country_code (2 or 3)"),
    geo: Geo = Depends(get_geo),
):
    if ip:
        geo.set_ip(ip)
    accessor = _accessor_name(name)
    args = (alpha,) if alpha is not None and accessor == "get_country_code" else ()
    value = geo.call(accessor, *args)
    return GeoFieldResponse(ip=geo.get_ip(), field=name, value=value)


@router.get("/geo/{ip}", response_model=GeoLocationResponse)
def lookup_ip(ip: str, geo: Geo = Depends(get_geo)):
    geo.set_ip(ip)
    return GeoLocationResponse(**geo.get_all())
