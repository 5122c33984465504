# app/services/theme_service.py
# Per-domain themes: load from app/themes, validate, fall back to the Catapult default.
from __future__ import annotations

import json
import logging
import pathlib
from functools import lru_cache
from typing import Dict, MutableMapping, Optional

from jsonschema import Draft202012Validator
from pydantic import ValidationError

from app.schemas.theme import Theme

logger = logging.getLogger(__name__)

THEMES_DIR = pathlib.Path(__file__).resolve().parents[1] / "themes"
SCHEMA_FILE = "theme.schema.json"

# domain key -> file stem under THEMES_DIR
AVAILABLE_THEMES: Dict[str, str] = {
    "siz": "catapult-siz",
    "credo": "catapult-credo",
}


def _read_json(path: pathlib.Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"Theme file does not exist: {path.as_posix()}")
    txt = path.read_bytes().decode("utf-8-sig")  # tolerate BOM
    data = json.loads(txt)
    if not isinstance(data, dict):
        raise ValueError(f"Theme in {path.name} must be a JSON object.")
    return data


@lru_cache(maxsize=1)
def _theme_validator() -> Draft202012Validator:
    return Draft202012Validator(_read_json(THEMES_DIR / SCHEMA_FILE))


def validate_theme_document(data: dict) -> None:
    errors = sorted(_theme_validator().iter_errors(data), key=lambda e: list(e.path))
    if errors:
        e = errors[0]
        path = ".".join(str(p) for p in e.path)
        raise ValueError(f"Theme validation error at '{path}': {e.message}")


def get_default_theme() -> Theme:
    """Connected Places Catapult house style."""
    return Theme.model_validate(
        {
            "name": "Catapult Default",
            "domain": "default",
            "description": "Default Catapult theme",
            "colors": {
                "primary": "#006E51",
                "secondary": "#E72D2B",
                "accent": "#EF7A1E",
                "charcoal": "#2E2D2B",
                "darkBlue": "#122836",
                "background": "#FFFFFF",
                "foreground": "#2E2D2B",
                "muted": "#F5F5F5",
                "mutedForeground": "#6B7280",
            },
            "typography": {
                "fontFamily": {"heading": "Inter, sans-serif", "body": "Inter, sans-serif"},
                "fontSize": {
                    "xs": "0.75rem",
                    "sm": "0.875rem",
                    "base": "1rem",
                    "lg": "1.125rem",
                    "xl": "1.25rem",
                    "2xl": "1.5rem",
                    "3xl": "1.875rem",
                    "4xl": "2.25rem",
                },
            },
            "branding": {
                "logo": "/logos/catapult.svg",
                "favicon": "/favicon.ico",
                "title": "Connected Places Catapult",
                "subtitle": "Innovation for Connected Places",
            },
        }
    )


def load_theme(domain: str, *, themes_dir: Optional[pathlib.Path] = None) -> Theme:
    """
    Theme for a domain key. Unknown domains, unreadable files and files
    that fail validation all log a warning and yield the default theme.
    """
    stem = AVAILABLE_THEMES.get(domain)
    if not stem:
        logger.warning("No theme registered for domain %r, using default", domain)
        return get_default_theme()

    path = (themes_dir or THEMES_DIR) / f"{stem}.json"
    try:
        data = _read_json(path)
        validate_theme_document(data)
        return Theme.model_validate(data)
    except (OSError, ValueError, ValidationError) as exc:
        logger.warning("Failed to load theme for domain %r: %s", domain, exc)
        return get_default_theme()


def css_variables(theme: Theme) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for key, value in theme.colors.model_dump(by_alias=True).items():
        out[f"--color-{key}"] = value
    out["--font-heading"] = theme.typography.font_family.heading
    out["--font-body"] = theme.typography.font_family.body
    return out


def apply_theme(theme: Theme, style: Optional[MutableMapping[str, str]]) -> None:
    """
    Writes the theme's CSS custom properties into a style mapping
    (a template context, a root style dict...). No-op without one.
    """
    if style is None:
        return
    for name, value in css_variables(theme).items():
        style[name] = value


def render_root_css(theme: Theme) -> str:
    style: Dict[str, str] = {}
    apply_theme(theme, style)
    body = "\n".join(f"  {name}: {value};" for name, value in style.items())
    return ":root {\n" + body + "\n}\n"
