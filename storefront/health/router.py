from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from storefront.infra.database import Store
from storefront.infra.deps import get_store
from storefront.utils.rate_limit import rate_limit_health_info

router = APIRouter(tags=["Health"])


@router.get("/check", response_class=PlainTextResponse)
def check():
    return "Hello world!"


@router.get("/health")
def health_root(request: Request, store: Store = Depends(get_store)):
    db_ok = store.ping()
    info = {"ok": db_ok, "database": {"connect_ok": db_ok}, "rate_limit": rate_limit_health_info(request)}
    return JSONResponse(info, status_code=200 if db_ok else 503)
