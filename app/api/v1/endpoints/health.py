# app/api/v1/endpoints/health.py
from fastapi import APIRouter

from app.core.settings import config
from app.db.session import check_connection

router = APIRouter()


# no key required; cleared in the OpenAPI document too
@router.get("/ping", openapi_extra={"security": []})
def ping():
    return {"status": "ok", "env": config.app.env}


@router.get("/db", openapi_extra={"security": []})
def db_health():
    ok = check_connection()
    return {"status": "ok" if ok else "unavailable", "database": ok}
