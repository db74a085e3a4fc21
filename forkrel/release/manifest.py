from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from forkrel.core.result import Err, Ok, Result
from forkrel.core.structured import StrDict, as_str_dict, get_str
from forkrel.platform.files import atomic_write_bytes, atomic_write_text
from forkrel.release.errors import ReleaseError


@dataclass(frozen=True, slots=True)
class Manifest:
    """Snapshot of package.json taken once per release attempt."""

    path: Path
    name: str
    version: str
    raw: bytes


def read_manifest(*, path: Path) -> Result[Manifest, ReleaseError]:
    try:
        raw = path.read_bytes()
    except OSError as e:
        return Err(
            ReleaseError(
                kind="manifest_failed",
                message=f"failed to read {path.name}: {e}",
                hint=str(path),
            )
        )

    data = _decode(path=path, raw=raw)
    if isinstance(data, Err):
        return data

    name = get_str(data.value, "name")
    version = get_str(data.value, "version")
    if name is None or version is None:
        missing = "name" if name is None else "version"
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"missing {missing} in {path.name}",
                hint=str(path),
            )
        )

    return Ok(Manifest(path=path, name=name, version=version, raw=raw))


def write_manifest_version(*, manifest: Manifest, version: str) -> Result[None, ReleaseError]:
    data = _decode(path=manifest.path, raw=manifest.raw)
    if isinstance(data, Err):
        return data

    data.value["version"] = version
    try:
        atomic_write_text(manifest.path, json.dumps(data.value, indent=2) + "\n")
    except OSError as e:
        return Err(
            ReleaseError(
                kind="manifest_failed",
                message=f"failed to write {manifest.path.name}: {e}",
                hint=str(manifest.path),
            )
        )
    return Ok(None)


def restore_manifest(*, manifest: Manifest) -> Result[None, ReleaseError]:
    try:
        atomic_write_bytes(manifest.path, manifest.raw)
    except OSError as e:
        return Err(
            ReleaseError(
                kind="manifest_failed",
                message=f"failed to restore {manifest.path.name}: {e}",
                hint=f"Run: git checkout -- {manifest.path.name}",
            )
        )
    return Ok(None)


def with_manifest_version[T](
    *,
    manifest: Manifest,
    version: str,
    action: Callable[[], Result[T, ReleaseError]],
) -> Result[T, ReleaseError]:
    """Run ``action`` with ``version`` written into the manifest.

    The original bytes are put back on every exit path, including exceptions.
    If ``action`` fails, its error wins over a restore failure.
    """
    written = write_manifest_version(manifest=manifest, version=version)
    if isinstance(written, Err):
        restore_manifest(manifest=manifest)
        return written

    try:
        result = action()
    finally:
        restored = restore_manifest(manifest=manifest)

    if isinstance(result, Ok) and isinstance(restored, Err):
        return restored
    return result


def archive_name(*, package_name: str, version: str) -> str:
    """File name ``npm pack`` produces: ``@scope/name`` becomes ``scope-name``."""
    stem = package_name.removeprefix("@").replace("/", "-")
    return f"{stem}-{version}.tgz"


def _decode(*, path: Path, raw: bytes) -> Result[StrDict, ReleaseError]:
    try:
        obj: object = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"invalid JSON in {path.name}: {e}",
                hint=str(path),
            )
        )

    data = as_str_dict(obj)
    if data is None:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"invalid JSON root in {path.name}",
                hint=str(path),
            )
        )
    return Ok(data)
