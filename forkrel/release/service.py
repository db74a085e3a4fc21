from __future__ import annotations

import shlex
import shutil
from dataclasses import dataclass
from pathlib import Path

from forkrel.core.config import BuildConfig, Config
from forkrel.core.result import Err, Ok, Result
from forkrel.git.repository import Repository
from forkrel.output.console import ConsoleProtocol, Style
from forkrel.platform.process import run_silent
from forkrel.release.errors import ReleaseError
from forkrel.release.gh import create_release, ensure_gh_auth, ensure_gh_available, slug_from_remote
from forkrel.release.manifest import Manifest, archive_name, read_manifest, with_manifest_version
from forkrel.release.notes import write_release_notes
from forkrel.release.resolver import NextRelease, resolve_next, tag_pattern
from forkrel.release.semver import max_tag
from forkrel.release.tag_source import GitTagSource, TagSource
from forkrel.release.timeouts import BUILD_TIMEOUT_SECONDS

_DIRTY_PREVIEW = 5


@dataclass(frozen=True, slots=True)
class ReleasePlan:
    next: NextRelease
    manifest: Manifest
    archive: str
    repo: str
    previous_tag: str | None
    target: str
    prerelease: bool
    notes_path: Path


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    plan: ReleasePlan
    release_url: str | None


def resolve_release(*, tags: TagSource, marker: str) -> Result[NextRelease, ReleaseError]:
    """Read the resolver's inputs from ``tags`` and resolve once."""
    base = tags.read_manifest_version()
    if isinstance(base, Err):
        return base

    known = tags.list_tags(tag_pattern(marker))
    if isinstance(known, Err):
        return known

    return resolve_next(base.value, known.value, marker=marker)


def resolve_repo_slug(*, repo: Repository, configured: str | None) -> Result[str, ReleaseError]:
    if configured is not None:
        return Ok(configured)

    url = repo.remote_url("origin")
    if isinstance(url, Err):
        return Err(
            ReleaseError(
                kind="invalid_input",
                message="cannot determine GitHub repo",
                hint="Set [release] repo = \"owner/name\" in forkrel.toml",
            )
        )

    slug = slug_from_remote(url.value)
    if slug is None:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"origin is not a GitHub remote: {url.value}",
                hint="Set [release] repo = \"owner/name\" in forkrel.toml",
            )
        )
    return Ok(slug)


def plan_release(
    *,
    project_root: Path,
    config: Config,
    repo: Repository,
    tags: TagSource,
) -> Result[ReleasePlan, ReleaseError]:
    manifest = read_manifest(path=project_root / config.release.manifest)
    if isinstance(manifest, Err):
        return manifest

    nxt = resolve_release(tags=tags, marker=config.release.marker)
    if isinstance(nxt, Err):
        return nxt

    every_tag = tags.list_tags("v*")
    if isinstance(every_tag, Err):
        return every_tag

    slug = resolve_repo_slug(repo=repo, configured=config.release.repo)
    if isinstance(slug, Err):
        return slug

    return Ok(
        ReleasePlan(
            next=nxt.value,
            manifest=manifest.value,
            archive=archive_name(package_name=manifest.value.name, version=nxt.value.version),
            repo=slug.value,
            previous_tag=max_tag(every_tag.value),
            target=config.release.target,
            prerelease=config.release.prerelease,
            notes_path=project_root / config.release.notes_file,
        )
    )


def ensure_clean_tree(*, repo: Repository) -> Result[None, ReleaseError]:
    changes = repo.changes()
    if isinstance(changes, Err):
        return Err(
            ReleaseError(
                kind="git_failed",
                message="failed to check git status",
                hint=changes.error.message,
            )
        )

    if changes.value:
        preview = ", ".join(f"{c.pretty_xy()} {c.path}" for c in changes.value[:_DIRTY_PREVIEW])
        if len(changes.value) > _DIRTY_PREVIEW:
            preview += f", ... ({len(changes.value)} total)"
        return Err(
            ReleaseError(
                kind="dirty_tree",
                message=f"working tree is not clean: {repo.path}",
                hint=preview,
            )
        )
    return Ok(None)


def sync_tags(*, repo: Repository, console: ConsoleProtocol) -> Result[None, ReleaseError]:
    console.command(["git", "pull", "--rebase", "--tags"])
    pulled = repo.pull_tags()
    if isinstance(pulled, Err):
        return Err(
            ReleaseError(
                kind="remote_failed",
                message="failed to pull tags from upstream",
                hint=pulled.error.message,
            )
        )
    return Ok(None)


def build_project(
    *,
    project_root: Path,
    build: BuildConfig,
    console: ConsoleProtocol,
) -> Result[None, ReleaseError]:
    root = project_root.resolve()
    for rel in build.clean:
        target = (root / rel).resolve()
        if target == root or not target.is_relative_to(root):
            return Err(
                ReleaseError(
                    kind="invalid_input",
                    message=f"refusing to clean outside the project: {rel}",
                    hint="[build] clean entries must be paths inside the project",
                )
            )
        if target.exists():
            console.print(f"rm -rf {rel}", Style.DIM)
            try:
                if target.is_dir():
                    shutil.rmtree(target)
                else:
                    target.unlink()
            except OSError as e:
                return Err(
                    ReleaseError(
                        kind="build_failed",
                        message=f"failed to remove {rel}: {e}",
                        hint=str(target),
                    )
                )

    for line in build.commands:
        ran = _run_command(project_root=project_root, line=line, console=console)
        if isinstance(ran, Err):
            return ran
    return Ok(None)


def pack_project(
    *,
    plan: ReleasePlan,
    build: BuildConfig,
    console: ConsoleProtocol,
) -> Result[Path, ReleaseError]:
    project_root = plan.manifest.path.parent
    ran = _run_command(project_root=project_root, line=build.pack, console=console)
    if isinstance(ran, Err):
        return Err(
            ReleaseError(
                kind="pack_failed",
                message=ran.error.message,
                hint=ran.error.hint,
            )
        )

    archive = project_root / plan.archive
    if not archive.is_file():
        return Err(
            ReleaseError(
                kind="pack_failed",
                message=f"{plan.archive} does not exist",
                hint=f"`{build.pack}` did not produce the expected archive",
            )
        )
    return Ok(archive)


def publish(
    *,
    plan: ReleasePlan,
    repo: Repository,
    build: BuildConfig,
    console: ConsoleProtocol,
) -> Result[str, ReleaseError]:
    """Pack, tag, push, write notes and create the GitHub release.

    Expects the manifest to already carry the next version.
    """
    project_root = plan.manifest.path.parent
    tag = plan.next.tag

    archive = pack_project(plan=plan, build=build, console=console)
    if isinstance(archive, Err):
        return archive
    console.success(f"packed {archive.value.name}")

    message = f"Release {plan.next.version}"
    console.command(["git", "tag", "-a", tag, "-m", message])
    tagged = repo.create_tag(tag, message=message)
    if isinstance(tagged, Err):
        return Err(
            ReleaseError(
                kind="git_failed",
                message=f"failed to create tag {tag}",
                hint=tagged.error.message,
            )
        )

    console.command(["git", "push", "--tags"])
    pushed = repo.push_tags()
    if isinstance(pushed, Err):
        return Err(
            ReleaseError(
                kind="remote_failed",
                message="failed to push tags",
                hint=f"{pushed.error.message}\nThe tag {tag} exists locally only.",
            )
        )

    notes = write_release_notes(
        path=plan.notes_path,
        repo=plan.repo,
        tag=tag,
        archive=plan.archive,
        previous_tag=plan.previous_tag,
    )
    if isinstance(notes, Err):
        return notes

    console.command(["gh", "release", "create", tag, f"{plan.archive}#package"])
    return create_release(
        project_root=project_root,
        repo=plan.repo,
        tag=tag,
        archive=archive.value,
        notes_file=notes.value.path,
        target=plan.target,
        prerelease=plan.prerelease,
    )


def print_plan(*, plan: ReleasePlan, console: ConsoleProtocol) -> None:
    nxt = plan.next
    console.print(f"package: {plan.manifest.name}", Style.DIM)
    console.print(f"base: {nxt.base}", Style.DIM)
    if nxt.anchor is None:
        console.print(f"family: new ({nxt.marker} counter starts at 0)", Style.DIM)
    else:
        console.print(f"anchor: {nxt.anchor}", Style.DIM)
    console.print(f"previous tag: {plan.previous_tag or '(none)'}", Style.DIM)
    console.print(f"repo: {plan.repo} (target {plan.target})", Style.DIM)
    console.print(f"next: {nxt.tag}", Style.BOLD)


def run_release(
    *,
    project_root: Path,
    config: Config,
    console: ConsoleProtocol,
    dry_run: bool,
    skip_build: bool = False,
) -> Result[ReleaseOutcome, ReleaseError]:
    """Cut one fork release.

    Dry-run resolves and prints the plan from local tags without touching the
    checkout, the remote or GitHub.
    """
    repo = Repository(project_root)
    tags = GitTagSource(repo=repo, manifest_path=project_root / config.release.manifest)

    if not dry_run:
        ok = ensure_gh_available()
        if isinstance(ok, Err):
            return ok
        ok = ensure_gh_auth(project_root=project_root)
        if isinstance(ok, Err):
            return ok

    clean = ensure_clean_tree(repo=repo)
    if isinstance(clean, Err):
        if not dry_run or clean.error.kind != "dirty_tree":
            return clean
        console.warning(clean.error.pretty())

    if not dry_run:
        synced = sync_tags(repo=repo, console=console)
        if isinstance(synced, Err):
            return synced

    console.header("Plan")
    plan = plan_release(project_root=project_root, config=config, repo=repo, tags=tags)
    if isinstance(plan, Err):
        return plan
    print_plan(plan=plan.value, console=console)

    if dry_run:
        console.print("dry-run: nothing built, tagged or published", Style.DIM)
        return Ok(ReleaseOutcome(plan=plan.value, release_url=None))

    if not skip_build:
        console.header("Build")
        built = build_project(project_root=project_root, build=config.build, console=console)
        if isinstance(built, Err):
            return built

    console.header("Publish")
    url = with_manifest_version(
        manifest=plan.value.manifest,
        version=plan.value.next.version,
        action=lambda: publish(plan=plan.value, repo=repo, build=config.build, console=console),
    )
    if isinstance(url, Err):
        return url

    console.success(f"released {plan.value.next.tag}")
    if url.value:
        console.print(url.value, Style.INFO)
    return Ok(ReleaseOutcome(plan=plan.value, release_url=url.value or None))


def _run_command(
    *,
    project_root: Path,
    line: str,
    console: ConsoleProtocol,
) -> Result[None, ReleaseError]:
    try:
        cmd = shlex.split(line)
    except ValueError as e:
        return Err(
            ReleaseError(
                kind="invalid_input",
                message=f"cannot parse command {line!r}: {e}",
            )
        )
    if not cmd:
        return Ok(None)

    console.command(cmd)
    result = run_silent(cmd, cwd=project_root, timeout=BUILD_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        e = result.error
        return Err(
            ReleaseError(
                kind="build_failed",
                message=f"`{line}` failed (exit {e.returncode})",
                hint=e.stderr.strip() or None,
            )
        )
    return Ok(None)
