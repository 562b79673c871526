"""
Target classification. A configured string is either a network host (pinged)
or an HTTP(S) endpoint (requested); the kind is decided once, here.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

HTTP_PREFIXES = ("http://", "https://")


class TargetKind(Enum):
    HOST = "host"
    ENDPOINT = "endpoint"


@dataclass(frozen=True)
class Target:
    name: str
    kind: TargetKind

    @property
    def is_endpoint(self) -> bool:
        return self.kind is TargetKind.ENDPOINT


def normalize_target(raw: str) -> Optional[str]:
    trimmed = str(raw).strip()
    return trimmed or None


def classify_target(raw: str) -> Optional[Target]:
    """Normalize and classify one entry; None for blank entries."""
    name = normalize_target(raw)
    if name is None:
        return None
    kind = TargetKind.ENDPOINT if name.startswith(HTTP_PREFIXES) else TargetKind.HOST
    return Target(name=name, kind=kind)


def classify_targets(raw_targets: Iterable[str]) -> list[Target]:
    """Classify a configured list, dropping blanks and repeated entries (first wins)."""
    seen: set[str] = set()
    targets: list[Target] = []
    for raw in raw_targets:
        target = classify_target(raw)
        if target is None or target.name in seen:
            continue
        seen.add(target.name)
        targets.append(target)
    return targets
