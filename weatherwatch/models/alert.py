"""Threshold alert models."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class ThresholdKind(StrEnum):
    HIGH_TEMPERATURE = "high-temperature"
    SUB_ZERO = "sub-zero"


@dataclass(frozen=True)
class AlertEvent:
    location: str
    kind: ThresholdKind
    temperature_c: float
    message: str
    raised_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "location": self.location,
            "kind": self.kind.value,
            "temperature_c": self.temperature_c,
            "message": self.message,
            "raised_at": self.raised_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AlertEvent":
        return cls(
            location=data["location"],
            kind=ThresholdKind(data["kind"]),
            temperature_c=data["temperature_c"],
            message=data["message"],
            raised_at=data["raised_at"],
        )
