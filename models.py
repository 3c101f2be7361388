"""
models.py
Data types shared by the discovery pipeline.
"""

import os
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import List, Optional, NamedTuple, Iterator


@dataclass(frozen=True)
class SoftwareRecord:
    """An installed program as reported by the inventory scanner."""
    name: str = ""
    publisher: str = ""
    install_path: str = ""
    category: str = ""


class ArtifactKind(Enum):
    CONFIGURATION = "configuration"
    USER_DATA = "user-data"
    CACHE = "cache"
    DATABASE = "database"
    REGISTRY_KEY = "registry-key"
    OTHER = "other"


class PathTemplate(NamedTuple):
    """A path with unresolved %TOKEN% placeholders and at most one '*' level."""
    template: str
    source_generator: str


def path_key(path: str) -> str:
    """Case-insensitive identity of a path, used for deduplication."""
    return os.path.normcase(os.path.normpath(path)).lower()


@dataclass
class Candidate:
    """A file, directory or registry key believed to hold settings."""
    path: str
    is_directory: bool = False
    size_bytes: int = 0
    last_modified: float = 0.0
    artifact_kind: ArtifactKind = ArtifactKind.OTHER
    score: int = 0
    source_description: str = ""
    # Found below a high-value subfolder (User, Settings, ...) in precise mode
    via_whitelisted_subfolder: bool = False

    @property
    def key(self) -> str:
        return path_key(self.path)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["artifact_kind"] = self.artifact_kind.value
        return data


@dataclass
class DiscoveryResult:
    """Ranked candidates of one discovery run."""
    software: SoftwareRecord
    candidates: List[Candidate] = field(default_factory=list)
    cancelled: bool = False
    matched_profile: Optional[str] = None

    def __iter__(self) -> Iterator[Candidate]:
        return iter(self.candidates)

    def __len__(self) -> int:
        return len(self.candidates)

    def __getitem__(self, index):
        return self.candidates[index]

    @property
    def top(self) -> Optional[Candidate]:
        return self.candidates[0] if self.candidates else None


@dataclass
class ProfilePath:
    path: str
    description: str = ""
    required: bool = False
    is_directory: bool = False
    priority: int = 1

    @classmethod
    def from_dict(cls, data: dict) -> "ProfilePath":
        return cls(
            path=str(data.get("path", "")),
            description=str(data.get("description", "")),
            required=bool(data.get("required", False)),
            is_directory=bool(data.get("is_directory", False)),
            priority=int(data.get("priority", 1)),
        )


@dataclass
class Profile:
    """Known configuration locations of one piece of software."""
    name: str
    publisher: str = ""
    alternate_names: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    config_paths: List[ProfilePath] = field(default_factory=list)
    exclude_patterns: List[str] = field(default_factory=list)
    priority: int = 0
    predefined: bool = False
    notes: str = ""
    created_at: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Profile":
        return cls(
            name=str(data.get("name", "")),
            publisher=str(data.get("publisher", "") or ""),
            alternate_names=[str(n) for n in data.get("alternate_names", []) or []],
            keywords=[str(k) for k in data.get("keywords", []) or []],
            config_paths=[ProfilePath.from_dict(p) for p in data.get("config_paths", []) or [] if isinstance(p, dict)],
            exclude_patterns=[str(p) for p in data.get("exclude_patterns", []) or []],
            priority=int(data.get("priority", 0) or 0),
            predefined=bool(data.get("predefined", False)),
            notes=str(data.get("notes", "") or ""),
            created_at=str(data.get("created_at", "") or ""),
        )
