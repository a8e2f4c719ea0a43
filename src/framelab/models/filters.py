"""
Filter Models
=============

Channel selectors and the filter-mode variant.

FilterMode is a tagged variant: a kind plus, for stickers only, the sticker
identifier. It is resolved once per tick by the filter dispatch in
`framelab.processing.filters`.

UI labels:
    The original control panel used free-text labels ("HSV Overlay",
    "Hat", ...). `FilterMode.parse` accepts those labels so presentation
    layers can pass them straight through.
"""

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ChannelSelector(str, Enum):
    """
    Which intensity a threshold compares against.

    Attributes:
        ALL: Unweighted mean of R, G and B
        R: Red channel value
        G: Green channel value
        B: Blue channel value
    """

    ALL = "ALL"
    R = "R"
    G = "G"
    B = "B"


class FilterKind(str, Enum):
    """Filter variants available to the face preview and extension view."""

    IDENTITY = "IDENTITY"
    GRAYSCALE = "GRAYSCALE"
    BLUR = "BLUR"
    COLOR_SPACE_OVERLAY = "COLOR_SPACE_OVERLAY"
    PIXELATE = "PIXELATE"
    SEPIA = "SEPIA"
    INVERT = "INVERT"
    EDGE = "EDGE"
    STICKER = "STICKER"


_LABELS: Dict[str, FilterKind] = {
    "none": FilterKind.IDENTITY,
    "off": FilterKind.IDENTITY,
    "identity": FilterKind.IDENTITY,
    "grayscale": FilterKind.GRAYSCALE,
    "gray": FilterKind.GRAYSCALE,
    "blur": FilterKind.BLUR,
    "hsv overlay": FilterKind.COLOR_SPACE_OVERLAY,
    "color_space_overlay": FilterKind.COLOR_SPACE_OVERLAY,
    "pixelate": FilterKind.PIXELATE,
    "sepia": FilterKind.SEPIA,
    "invert": FilterKind.INVERT,
    "edge": FilterKind.EDGE,
}

# Number keys of the face cell: 0=Off, 1=Gray, 2=Blur, 3=HSV overlay, 4=Pixelate
KEY_FILTERS: Dict[str, FilterKind] = {
    "0": FilterKind.IDENTITY,
    "1": FilterKind.GRAYSCALE,
    "2": FilterKind.BLUR,
    "3": FilterKind.COLOR_SPACE_OVERLAY,
    "4": FilterKind.PIXELATE,
}


class FilterMode(BaseModel):
    """
    Selected filter.

    Attributes:
        kind: Filter variant
        sticker_id: Sticker identifier, required when kind is STICKER

    Example:
        FilterMode(kind=FilterKind.PIXELATE)
        FilterMode.sticker("Hat")
        FilterMode.parse("HSV Overlay")
    """

    model_config = ConfigDict(frozen=True)

    kind: FilterKind = Field(
        default=FilterKind.IDENTITY,
        description="Filter variant",
    )

    sticker_id: Optional[str] = Field(
        default=None,
        description="Sticker identifier (STICKER kind only)",
    )

    @model_validator(mode="after")
    def check_sticker_id(self) -> "FilterMode":
        """A sticker id is carried by STICKER modes and nothing else."""
        if self.kind == FilterKind.STICKER and not self.sticker_id:
            raise ValueError("STICKER filter mode requires a sticker_id")
        if self.kind != FilterKind.STICKER and self.sticker_id is not None:
            raise ValueError(f"{self.kind.value} filter mode takes no sticker_id")
        return self

    @classmethod
    def identity(cls) -> "FilterMode":
        return cls(kind=FilterKind.IDENTITY)

    @classmethod
    def sticker(cls, sticker_id: str) -> "FilterMode":
        return cls(kind=FilterKind.STICKER, sticker_id=sticker_id)

    @classmethod
    def parse(cls, label: str) -> "FilterMode":
        """
        Parse a UI label.

        Known filter names map to their kind. Any other non-empty label is
        taken as a sticker identifier, as in the original fun-filter menu.

        Raises:
            ValueError: If the label is empty
        """
        normalized = (label or "").strip()
        if not normalized:
            raise ValueError("Filter label must not be empty")
        kind = _LABELS.get(normalized.lower())
        if kind is None:
            try:
                kind = FilterKind(normalized.upper())
            except ValueError:
                return cls.sticker(normalized)
            if kind == FilterKind.STICKER:
                raise ValueError("STICKER label needs a sticker name")
        return cls(kind=kind)

    @property
    def label(self) -> str:
        """Human-readable label for captions."""
        if self.kind == FilterKind.STICKER:
            return self.sticker_id or ""
        if self.kind == FilterKind.IDENTITY:
            return "None"
        if self.kind == FilterKind.COLOR_SPACE_OVERLAY:
            return "HSV Overlay"
        return self.kind.value.title()
