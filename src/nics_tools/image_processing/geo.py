"""Latitude/longitude value type derived from GPS metadata."""

import math

from pydantic import BaseModel, ConfigDict, Field


class GeoLocation(BaseModel):
    """A resolved GPS coordinate in signed decimal degrees."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90.0, le=90.0, description="Decimal degrees, south negative")
    longitude: float = Field(ge=-180.0, le=180.0, description="Decimal degrees, west negative")

    @property
    def is_zero(self) -> bool:
        return self.latitude == 0 and self.longitude == 0

    @staticmethod
    def from_dms(degrees: float, minutes: float, seconds: float, ref: str) -> float | None:
        """Convert degrees/minutes/seconds plus a hemisphere reference to decimal.

        Args:
            degrees: Whole or fractional degrees
            minutes: Minutes of arc
            seconds: Seconds of arc
            ref: One of N, S, E, W (case-insensitive)

        Returns:
            Signed decimal degrees, or None for an unknown reference or a
            non-finite result
        """
        decimal = abs(degrees) + minutes / 60.0 + seconds / 3600.0
        if not math.isfinite(decimal):
            return None

        ref = ref.strip().upper()
        if ref in ("S", "W"):
            return -decimal
        if ref in ("N", "E"):
            return decimal
        return None

    @staticmethod
    def to_dms(decimal: float) -> str:
        sign = "-" if decimal < 0 else ""
        value = abs(decimal)
        degrees = int(value)
        minutes = int((value - degrees) * 60)
        seconds = (value - degrees - minutes / 60.0) * 3600
        return f"{sign}{degrees}° {minutes}' {seconds:.2f}\""

    def to_dms_string(self) -> str:
        return f"{self.to_dms(self.latitude)}, {self.to_dms(self.longitude)}"

    def __str__(self) -> str:
        return f"{self.latitude}, {self.longitude}"
