from __future__ import annotations
from enum import Enum

from ..exceptions import UnknownColorspaceError


class Colorspace(Enum):
    RGB = "RGB"
    BGR = "BGR"
    HSV = "HSV"
    HLS = "HLS"
    YCrCb = "YCrCb"
    CIEXYZ = "CIEXYZ"
    CIELAB = "CIELAB"
    LMS = "LMS"
    Ruderman_lab = "Ruderman_lab"

    @classmethod
    def from_name(cls, name: "str | Colorspace") -> "Colorspace":
        """Resolve a user-supplied name (case-insensitive) to a member."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        raise UnknownColorspaceError(
            f"Unknown colorspace {name!r}; expected one of {', '.join(COLORSPACE_STRINGS)}"
        )


COLORSPACE_STRINGS = {space.value: space for space in Colorspace}

