from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple, TypeVar

T = TypeVar("T")


def parse_version_number(number: str) -> Tuple[int, ...]:
    return tuple(int(part) for part in number.strip().split("."))


@dataclass(frozen=True)
class Version:
    codename: str
    number: str

    @property
    def key(self) -> Tuple[int, ...]:
        return parse_version_number(self.number)

    def __lt__(self, other: "Version") -> bool:
        return self.key < other.key

    def __str__(self) -> str:
        return f"{self.codename} {self.number}"


# Files that carry no markers at all predate every release below.
UNVERSIONED = Version("", "0.0.0.0")

KNOWN_VERSIONS: Tuple[Version, ...] = (
    Version("Clara", "2.1.8.2"),
    Version("Dalek", "2.2.0.0"),
    Version("Dalek", "2.2.1.0"),
    Version("Dalek", "2.2.2.0"),
    Version("Dalek", "2.2.3.0"),
    Version("Dalek", "2.2.4.0"),
    Version("Dalek", "2.2.4.6"),
    Version("Boombayah", "2.3.0.0"),
    Version("Boombayah", "2.3.0.1"),
    Version("Boombayah", "2.3.0.2"),
)

CURRENT_VERSION = KNOWN_VERSIONS[-1]


@dataclass(frozen=True)
class Migration:
    """One forward schema step; ``apply`` must be idempotent."""

    name: str
    introduced_in: Version
    apply: Callable[[T], T]


def _activate(target: T) -> T:
    # "active" did not exist before 2.3.0.0; absence must not mean inactive.
    return dataclasses.replace(target, active=True)


MIGRATIONS: Tuple[Migration, ...] = (
    Migration("activate-targets", Version("Boombayah", "2.3.0.0"), _activate),
)


class VersionManager:
    def __init__(
        self,
        versions: Iterable[Version] = KNOWN_VERSIONS,
        current: Version = CURRENT_VERSION,
        migrations: Iterable[Migration] = MIGRATIONS,
    ):
        self.versions: List[Version] = list(versions)
        self.current = current
        self.migrations: List[Migration] = sorted(migrations, key=lambda step: step.introduced_in.key)

    def get(self, codename: str | None, number: str | None) -> Optional[Version]:
        for version in self.versions:
            if version.codename == codename and version.number == number:
                return version
        return None

    def detect(self, codename: str | None, number: str | None) -> Version:
        """Resolve root markers to a comparable version.

        Unregistered markers are compared by their number alone; missing or
        unparseable numbers are treated as older than every known release.
        """
        known = self.get(codename, number)
        if known is not None:
            return known
        if not number:
            return UNVERSIONED
        try:
            parse_version_number(number)
        except ValueError:
            return UNVERSIONED
        return Version(codename or "", number)

    def migrations_since(self, detected: Version) -> List[Migration]:
        return [step for step in self.migrations if detected < step.introduced_in]

    def upgrade(self, target: T, detected: Version) -> T:
        for step in self.migrations_since(detected):
            target = step.apply(target)
        return target
