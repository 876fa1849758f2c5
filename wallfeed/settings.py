"""User settings: the subscribed link ids and the run-on-boot flag."""

from __future__ import annotations

import json
import os
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

_UINT_MAX = 2**64 - 1
_ID_PATTERN = re.compile(r"\+?[0-9]+")


class InvalidIdsError(ValueError):
    """Raised when link id input cannot be parsed."""


def _valid_id(value: object) -> bool:
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and 0 <= value <= _UINT_MAX
    )


@dataclass
class Settings:
    ids: set[int] = field(default_factory=set)
    run_on_boot: bool = False

    def to_json(self) -> str:
        return json.dumps(
            {"ids": sorted(self.ids), "run_on_boot": self.run_on_boot},
            separators=(",", ":"),
        )

    @classmethod
    def from_json(cls, text: str) -> "Settings":
        """Parse settings JSON; raises ValueError if it is malformed."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("settings must be a JSON object")
        try:
            ids = data["ids"]
            run_on_boot = data["run_on_boot"]
        except KeyError as exc:
            raise ValueError(f"missing field {exc.args[0]!r}") from None
        if not isinstance(ids, list) or not all(_valid_id(i) for i in ids):
            raise ValueError("ids must be a list of unsigned integers")
        if not isinstance(run_on_boot, bool):
            raise ValueError("run_on_boot must be a boolean")
        return cls(ids=set(ids), run_on_boot=run_on_boot)


PathLike = Union[str, "os.PathLike[str]"]


def read_settings(path: PathLike) -> Settings:
    """Load settings, falling back to defaults if the file is missing or invalid."""
    try:
        return Settings.from_json(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return Settings()


def save_settings(settings: Settings, path: PathLike) -> None:
    Path(path).write_text(settings.to_json(), encoding="utf-8")


def parse_ids(text: str) -> set[int]:
    """Parse whitespace-separated link ids."""
    ids = set()
    for word in text.split():
        if not _ID_PATTERN.fullmatch(word):
            raise InvalidIdsError(f"Invalid link ID(s) input: {word!r}")
        value = int(word)
        if value > _UINT_MAX:
            raise InvalidIdsError(f"Invalid link ID(s) input: {word!r}")
        ids.add(value)
    return ids


def format_ids(ids: Iterable[int]) -> str:
    return " ".join(str(i) for i in sorted(ids))


def startup_dir(
    platform: Optional[str] = None, environ: Optional[Mapping[str, str]] = None
) -> Path:
    """The directory whose programs the desktop starts at login."""
    platform = sys.platform if platform is None else platform
    environ = os.environ if environ is None else environ
    if platform.startswith("win"):
        try:
            base = environ["APPDATA"]
        except KeyError:
            raise LookupError("environment variable APPDATA is not set") from None
        return Path(base, "Microsoft", "Windows", "Start Menu", "Programs", "Startup")
    if platform.startswith("linux"):
        try:
            base = environ["XDG_CONFIG_HOME"]
        except KeyError:
            raise LookupError("environment variable XDG_CONFIG_HOME is not set") from None
        return Path(base, "autostart")
    raise LookupError(f"no startup directory known for platform {platform!r}")