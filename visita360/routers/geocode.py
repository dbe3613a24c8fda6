"""
geocode.py — Geocoding API for the visit registration form

Failures are not HTTP errors: the body carries result=null plus the
human-readable error so the form can show it next to the address field.

Called by: main.py (router mount)
Depends on: services/geocode_service, context
"""

from fastapi import APIRouter, Depends

from ..context import AppContext, get_context

router = APIRouter()


@router.get("/api/geocode")
async def geocode(address: str, ctx: AppContext = Depends(get_context)):
    result = await ctx.geocoder.geocode(address)
    return {"result": result, "error": ctx.geocoder.error}


@router.get("/api/geocode/reverse")
async def reverse_geocode(lat: str, lng: str, ctx: AppContext = Depends(get_context)):
    address = await ctx.geocoder.reverse_geocode(lat, lng)
    return {"address": address, "error": ctx.geocoder.error}


@router.get("/api/geocode/validate")
async def validate(lat: str, lng: str, ctx: AppContext = Depends(get_context)):
    return {"valid": ctx.geocoder.validate_coordinates(lat, lng)}


@router.get("/api/geocode/cache")
async def cache_stats(ctx: AppContext = Depends(get_context)):
    return ctx.geocode_cache.stats()


@router.delete("/api/geocode/cache")
async def clear_cache(ctx: AppContext = Depends(get_context)):
    ctx.geocode_cache.clear()
    return {"ok": True}
