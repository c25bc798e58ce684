"""Read and update Java-style ``key=value`` build metadata (gradle.properties).

Only plain ``key=value`` lines are understood; comments, blank lines and key
order are preserved on rewrite.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from relops.core.result import Err, Ok, Result
from relops.platform.files import atomic_write_text
from relops.release.errors import ReleaseError

__all__ = [
    "get_property",
    "parse_properties",
    "read_properties",
    "require_property",
    "set_properties",
]


def _is_comment(line: str) -> bool:
    s = line.lstrip()
    return not s or s.startswith("#") or s.startswith("!")


def _split(line: str) -> tuple[str, str] | None:
    if _is_comment(line) or "=" not in line:
        return None
    key, value = line.split("=", 1)
    return key.strip(), value.strip()


def parse_properties(text: str) -> dict[str, str]:
    out: dict[str, str] = {}
    for line in text.splitlines():
        kv = _split(line)
        if kv is not None:
            out[kv[0]] = kv[1]
    return out


def _read_text(path: Path) -> Result[str, ReleaseError]:
    try:
        return Ok(path.read_text(encoding="utf-8"))
    except OSError as e:
        return Err(
            ReleaseError(
                kind="properties_failed",
                message=f"failed to read {path.name}: {e}",
                hint=str(path),
            )
        )


def read_properties(path: Path) -> Result[dict[str, str], ReleaseError]:
    text = _read_text(path)
    if isinstance(text, Err):
        return text
    return Ok(parse_properties(text.value))


def require_property(
    props: Mapping[str, str], key: str, *, source: str
) -> Result[str, ReleaseError]:
    value = props.get(key)
    if not value:
        return Err(
            ReleaseError(
                kind="properties_failed",
                message=f"missing '{key}' in {source}",
            )
        )
    return Ok(value)


def get_property(path: Path, key: str) -> Result[str, ReleaseError]:
    props = read_properties(path)
    if isinstance(props, Err):
        return props
    return require_property(props.value, key, source=path.name)


def set_properties(path: Path, updates: Mapping[str, str]) -> Result[bool, ReleaseError]:
    """Rewrite ``key=`` lines in place, appending keys that are absent.

    Returns:
        Ok(True) when the file changed, Ok(False) when it already matched.
    """
    text = _read_text(path)
    if isinstance(text, Err):
        return text

    pending = dict(updates)
    lines = text.value.splitlines()
    out: list[str] = []
    for line in lines:
        kv = _split(line)
        if kv is not None and kv[0] in pending:
            out.append(f"{kv[0]}={pending.pop(kv[0])}")
        else:
            out.append(line)
    out.extend(f"{k}={v}" for k, v in pending.items())

    new_text = "\n".join(out) + "\n"
    if new_text == text.value:
        return Ok(False)

    try:
        atomic_write_text(path, new_text)
    except OSError as e:
        return Err(
            ReleaseError(
                kind="properties_failed",
                message=f"failed to write {path.name}: {e}",
                hint=str(path),
            )
        )
    return Ok(True)
