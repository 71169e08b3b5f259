from __future__ import annotations

import datetime as dt
import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .client import RconClient
from .errors import RconError

logger = logging.getLogger(__name__)

DEFAULT_ANNOUNCE = "World backup created!"

Runner = Callable[..., "subprocess.CompletedProcess[bytes]"]


@dataclass(frozen=True, slots=True)
class BackupPaths:
    snapshot: Path
    archive: Path

    @staticmethod
    def for_day(backup_dir: Path, day: dt.date) -> "BackupPaths":
        # tar -g snapshot is shared by every archive of the same %W week.
        week = day.strftime("%Y-%W")
        return BackupPaths(
            snapshot=backup_dir / f"index.{week}.snar",
            archive=backup_dir / f"backup.{week}.{day.strftime('%Y-%m-%d')}.tar",
        )


@dataclass(slots=True)
class BackupResult:
    paths: BackupPaths
    replies: List[str] = field(default_factory=list)


def tar_command(paths: BackupPaths, world_dir: Path) -> Sequence[str]:
    return ["tar", "-cg", str(paths.snapshot), "-f", str(paths.archive), str(world_dir)]


def _resume_saving(client: RconClient, result: BackupResult, *, raise_errors: bool) -> None:
    # With raise_errors False an earlier failure is already propagating and must not be replaced.
    if client.session.poisoned:
        logger.warning("connection unusable, could not send save-on")
        return
    try:
        result.replies.append(client.execute("save-on"))
    except (RconError, OSError) as exc:
        if raise_errors:
            raise
        logger.warning("save-on failed: %s", exc)


def run_backup(
    client: RconClient,
    *,
    world_dir: Path,
    backup_dir: Path,
    announce: str = DEFAULT_ANNOUNCE,
    today: Optional[dt.date] = None,
    runner: Runner = subprocess.run,
) -> BackupResult:
    """Pause saving, archive the world directory with tar, then resume saving.

    ``save-on`` is sent even when tar fails so the server is never left with
    persistence disabled.
    """
    paths = BackupPaths.for_day(Path(backup_dir), today or dt.date.today())
    result = BackupResult(paths)

    result.replies.append(client.execute("save-off"))
    try:
        result.replies.append(client.execute("save-all"))
        Path(backup_dir).mkdir(parents=True, exist_ok=True)
        cmd = tar_command(paths, Path(world_dir))
        logger.info("archiving %s to %s", world_dir, paths.archive)
        runner(cmd, check=True, capture_output=True)
        result.replies.append(client.execute(f"say {announce}"))
    except BaseException:
        _resume_saving(client, result, raise_errors=False)
        raise
    _resume_saving(client, result, raise_errors=True)

    return result
