import logging

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from ..context import GeoContext
from ..errors import ConfigurationError
from ..geo import Geo
from ..providers import MaxMindProvider, get_provider, replace_provider

router = APIRouter(tags=["config"])
logger = logging.getLogger("app")


class GeoIPCfg(BaseModel):
    path: str


@router.put("/config/geoip")
def set_geoip(cfg: GeoIPCfg):
    """Swap the provider for a MaxMind database at a new path; the old one closes at shutdown"""
    if not cfg.path:
        raise HTTPException(400, "path required")
    provider = MaxMindProvider(cfg.path)
    provider.load()
    try:
        provider.ensure_loaded()
    except ConfigurationError as e:
        raise HTTPException(400, str(e))

    replace_provider(provider)
    logger.info("geo provider replaced", extra={"component": "api", "db_path": cfg.path})
    return {"ok": True, "provider": provider.get_status()}


@router.post("/config/geoip/test")
def test_geoip(ip: str = Query(...)):
    geo = Geo(get_provider(), GeoContext(ip=ip))
    return {"ip": ip, "geo": geo.get_all()}
