# app/api/v1/endpoints/themes.py
from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from app.api.deps.auth import require_read_access
from app.schemas.theme import Theme
from app.services.theme_service import load_theme, render_root_css

router = APIRouter()


@router.get(
    "/themes/{domain}",
    response_model=Theme,
    dependencies=[Depends(require_read_access)],
)
def get_theme_endpoint(domain: str):
    # unknown domains get the default theme, never a 404
    return load_theme(domain)


@router.get(
    "/themes/{domain}/css",
    response_class=PlainTextResponse,
    dependencies=[Depends(require_read_access)],
)
def get_theme_css_endpoint(domain: str):
    return PlainTextResponse(render_root_css(load_theme(domain)), media_type="text/css")
