"""Chart source (repository) models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Repository:
    name: str
    url: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "url": self.url}
