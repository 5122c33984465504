# app/schemas/theme.py
# Theme shape. Stored files use camelCase keys; aliases keep them on the wire.
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _ThemePart(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ThemeColors(_ThemePart):
    primary: str
    secondary: str
    accent: str
    charcoal: str
    dark_blue: str = Field(alias="darkBlue")
    background: str
    foreground: str
    muted: str
    muted_foreground: str = Field(alias="mutedForeground")


class FontFamily(_ThemePart):
    heading: str
    body: str


class FontSize(_ThemePart):
    xs: str
    sm: str
    base: str
    lg: str
    xl: str
    xl2: str = Field(alias="2xl")
    xl3: str = Field(alias="3xl")
    xl4: str = Field(alias="4xl")


class Typography(_ThemePart):
    font_family: FontFamily = Field(alias="fontFamily")
    font_size: FontSize = Field(alias="fontSize")


class Branding(_ThemePart):
    logo: str
    favicon: str
    title: str
    subtitle: str


class Theme(_ThemePart):
    name: str
    domain: str
    description: str
    colors: ThemeColors
    typography: Typography
    branding: Branding
