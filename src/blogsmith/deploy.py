"""Publish the built site to the deploy branch with ``git subtree``.

The site source lives on one branch and the generated pages on another
(e.g. ``source`` and ``master`` for a GitHub user page). A deploy commits
the build directory temporarily on the source branch, splits it into its
own history, replaces the deploy branch's tree with that split and then
drops the temporary commit again.

Every git step runs from the repository toplevel, so the site (and its
config file) may live in a subdirectory of the repository.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from blogsmith.config import BlogsmithConfig
from blogsmith.errors import DeployError

logger = logging.getLogger(__name__)

SPLIT_BRANCH = "deploy"


def run_git(args: list[str], cwd: Path) -> str:
    """Run one git command and return its stripped stdout.

    Raises:
        DeployError: If git is missing or exits non-zero.
    """
    cmd = ["git", *args]
    logger.debug("Running %s", " ".join(cmd))
    try:
        result = subprocess.run(cmd, cwd=cwd, capture_output=True, text=True)
    except FileNotFoundError as exc:
        raise DeployError(cmd, "git not found on PATH") from exc

    if result.returncode != 0:
        raise DeployError(cmd, result.stderr)
    return result.stdout.strip()


def build_prefix(config: BlogsmithConfig, toplevel: Path) -> str:
    """The build directory relative to the repository toplevel."""
    destination = config.destination_dir.resolve()
    try:
        return destination.relative_to(toplevel.resolve()).as_posix()
    except ValueError as exc:
        raise DeployError(
            ["git", "subtree", "split"],
            f"build directory {destination} is outside the repository {toplevel}",
        ) from exc


def deploy_commands(
    config: BlogsmithConfig,
    revision: str,
    *,
    prefix: str | None = None,
    push: bool = False,
) -> list[list[str]]:
    """The git steps of a deploy, in order (without the leading ``git``).

    ``prefix`` defaults to the build directory relative to the site root.
    """
    settings = config.deploy
    if prefix is None:
        prefix = build_prefix(config, config.root)
    message = f"Deploy {revision}"
    commands = [
        ["stash"],
        ["checkout", settings.source_branch],
        ["add", prefix, "--force"],
        ["commit", "-m", message],
        ["subtree", "split", "--branch", SPLIT_BRANCH, "--prefix", prefix],
        ["checkout", settings.deploy_branch],
        ["read-tree", "--reset", "-u", SPLIT_BRANCH],
        ["commit", "--allow-empty", "-m", message],
        ["checkout", settings.source_branch],
        ["reset", "HEAD^"],
        ["branch", "-D", SPLIT_BRANCH],
    ]
    if push:
        commands.append(["push", settings.remote, settings.deploy_branch])
    return commands


def rollback_commands(config: BlogsmithConfig, completed: list[list[str]]) -> list[list[str]]:
    """Steps that undo a deploy interrupted after ``completed``.

    Returns to the source branch, drops the temporary build commit and
    deletes the split branch, each only if the interrupted run got that far.
    """
    settings = config.deploy
    checkouts = [args for args in completed if args[0] == "checkout"]
    temp_committed = any(args[0] == "commit" for args in completed)
    split_created = any(args[:2] == ["subtree", "split"] for args in completed)

    commands: list[list[str]] = []
    if checkouts and checkouts[-1][1] != settings.source_branch:
        commands.append(["checkout", "--force", settings.source_branch])
    if temp_committed and ["reset", "HEAD^"] not in completed:
        commands.append(["reset", "HEAD^"])
    if split_created and ["branch", "-D", SPLIT_BRANCH] not in completed:
        commands.append(["branch", "-D", SPLIT_BRANCH])
    return commands


def deploy(
    config: BlogsmithConfig,
    *,
    dry_run: bool = False,
    push: bool = False,
) -> list[list[str]]:
    """Run the deploy sequence for an already built site.

    Local changes are stashed first and restored afterwards. If a step
    fails, the repository is put back on the source branch without the
    temporary commit before the error propagates.

    Args:
        config: Site configuration (root, build directory, branches).
        dry_run: Only compute the commands; git is not called.
        push: Also push the deploy branch to the configured remote.

    Returns:
        The git commands (without ``git``), in the order they ran.

    Raises:
        DeployError: On the first failing git step.
    """
    if dry_run:
        return deploy_commands(config, "HEAD", push=push)

    toplevel = Path(run_git(["rev-parse", "--show-toplevel"], config.root))
    revision = run_git(["rev-parse", "--verify", "HEAD"], toplevel)
    commands = deploy_commands(
        config, revision, prefix=build_prefix(config, toplevel), push=push
    )
    stashes = run_git(["stash", "list"], toplevel)

    completed: list[list[str]] = []
    try:
        for args in commands:
            run_git(args, toplevel)
            completed.append(args)
    except DeployError:
        _rollback(config, toplevel, completed, stashes)
        raise

    _restore_stash(toplevel, stashes)
    logger.info("Deployed %s to %s", revision[:12], config.deploy.deploy_branch)
    return commands


def _rollback(
    config: BlogsmithConfig, toplevel: Path, completed: list[list[str]], stashes: str
) -> None:
    try:
        for args in rollback_commands(config, completed):
            run_git(args, toplevel)
        if completed:
            _restore_stash(toplevel, stashes)
    except DeployError as exc:
        logger.error("Rollback failed, repository needs manual cleanup: %s", exc)


def _restore_stash(toplevel: Path, stashes: str) -> None:
    if run_git(["stash", "list"], toplevel) != stashes:
        run_git(["stash", "pop"], toplevel)
