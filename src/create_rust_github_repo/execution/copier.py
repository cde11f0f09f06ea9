"""Copy config files and directories from a source tree into the new project."""

import shutil
from pathlib import Path
from typing import Iterable, List

import structlog

from create_rust_github_repo.exceptions import ConfigCopyError

logger = structlog.get_logger(__name__)


def copy_configs(source_dir: Path, paths: Iterable[str], target_dir: Path) -> List[Path]:
    """Copy each relative path from source_dir to the same place under target_dir.

    Directories are copied recursively. Intermediate directories are created
    and existing destination files are overwritten.

    Args:
        source_dir: Directory the paths are relative to
        paths: Relative file or directory paths, copied in order
        target_dir: Root of the destination tree

    Returns:
        Destination paths of every file written

    Raises:
        ConfigCopyError: If a source path is missing or a filesystem call fails
    """
    copied: List[Path] = []

    for rel in paths:
        source = source_dir / rel
        destination = target_dir / rel

        if not source.exists():
            raise ConfigCopyError(source, "source path does not exist")

        try:
            if source.is_dir():
                copied.extend(_copy_tree(source, destination))
            else:
                destination.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(source, destination)
                copied.append(destination)
        except OSError as e:
            failed = Path(e.filename) if e.filename else source
            raise ConfigCopyError(failed, e.strerror or str(e)) from e

        logger.debug("config_copied", source=str(source), destination=str(destination))

    logger.info("configs_copied", count=len(copied), target=str(target_dir))
    return copied


def _copy_tree(source: Path, destination: Path) -> List[Path]:
    written: List[Path] = []

    def _copy(src: str, dst: str) -> str:
        result = shutil.copy2(src, dst)
        written.append(Path(result))
        return result

    shutil.copytree(source, destination, copy_function=_copy, dirs_exist_ok=True)
    return written
