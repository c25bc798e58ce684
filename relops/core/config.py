"""Typed loading of the optional ``relops.toml`` file.

The file lives at the root of the plugin repository. Every key has a default
matching the conventional Gradle plugin layout, so most repositories need no
file at all.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_list, get_str, get_table

__all__ = [
    "CONFIG_FILE_NAME",
    "Config",
    "ConfigError",
    "NotesConfig",
    "NotesSource",
    "ReleaseConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = "relops.toml"

DEFAULT_REMOTE = "origin"
DEFAULT_BRANCH_PREFIX = "releases/v"
DEFAULT_PROPERTIES_FILE = "gradle.properties"
DEFAULT_VERSION_KEY = "version"
DEFAULT_MIN_VERSION_KEY = "kestraVersion"
DEFAULT_GRADLE = "./gradlew"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Config could not be read or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Where versions live and how branches and remotes are named."""

    remote: str = DEFAULT_REMOTE
    branch_prefix: str = DEFAULT_BRANCH_PREFIX
    properties_file: str = DEFAULT_PROPERTIES_FILE
    version_key: str = DEFAULT_VERSION_KEY
    min_version_key: str = DEFAULT_MIN_VERSION_KEY
    gradle: str = DEFAULT_GRADLE


@dataclass(frozen=True, slots=True)
class NotesSource:
    """A repository whose release notes are merged into the target release."""

    slug: str  # owner/name
    title: str


@dataclass(frozen=True, slots=True)
class NotesConfig:
    target: str | None = None
    sources: tuple[NotesSource, ...] = ()


@dataclass(frozen=True, slots=True)
class Config:
    release: ReleaseConfig = field(default_factory=ReleaseConfig)
    notes: NotesConfig = field(default_factory=NotesConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Build a Config from a parsed TOML mapping.

        Raises:
            ValueError: A notes source is missing its slug or title.
        """
        release: StrDict = get_table(data, "release") or {}
        notes: StrDict = get_table(data, "notes") or {}

        sources: list[NotesSource] = []
        for i, raw in enumerate(get_list(notes, "sources") or []):
            item = as_str_dict(raw)
            slug = get_str(item, "slug") if item is not None else None
            title = get_str(item, "title") if item is not None else None
            if slug is None or title is None:
                raise ValueError(f"notes.sources[{i}] requires 'slug' and 'title'")
            sources.append(NotesSource(slug=slug, title=title))

        return cls(
            release=ReleaseConfig(
                remote=get_str(release, "remote") or DEFAULT_REMOTE,
                branch_prefix=get_str(release, "branch_prefix") or DEFAULT_BRANCH_PREFIX,
                properties_file=get_str(release, "properties_file") or DEFAULT_PROPERTIES_FILE,
                version_key=get_str(release, "version_key") or DEFAULT_VERSION_KEY,
                min_version_key=get_str(release, "min_version_key") or DEFAULT_MIN_VERSION_KEY,
                gradle=get_str(release, "gradle") or DEFAULT_GRADLE,
            ),
            notes=NotesConfig(
                target=get_str(notes, "target"),
                sources=tuple(sources),
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and validate ``relops.toml``.

    Args:
        path: Path to the config file.

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure.
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(repo_root: Path) -> Result[Config, ConfigError]:
    """Load the repository config, falling back to defaults when absent.

    A present but broken file is still an error.
    """
    path = repo_root / CONFIG_FILE_NAME
    if not path.exists():
        return Ok(Config())
    return load_config(path)
