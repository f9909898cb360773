"""Thin wrapper around the terraform executable.

Both operations run terraform inside a working directory holding the
``.tf`` templates and ``terraform.tfvars``. Nothing is retried: ``apply``
creates real infrastructure.
"""

import os
import shutil
import subprocess
from pathlib import Path

from assetgraph.exceptions import TerraformError
from assetgraph.log import logger

logger = logger.getChild(__name__)

TERRAFORM_ENV = "ASSETGRAPH_TERRAFORM"
STATE_FILENAME = "terraform.tfstate"
TFVARS_FILENAME = "terraform.tfvars"


def find_terraform() -> str:
    """Locate the terraform executable.

    ``$ASSETGRAPH_TERRAFORM`` wins; otherwise ``terraform`` on PATH.

    Raises:
        TerraformError: If no executable can be found
    """
    override = os.environ.get(TERRAFORM_ENV)
    if override:
        return override
    found = shutil.which("terraform")
    if found is None:
        raise TerraformError(f"terraform executable not found on PATH (set {TERRAFORM_ENV} to override)")
    return found


def _run(directory: Path, *args: str) -> subprocess.CompletedProcess:
    cmd = [find_terraform(), *args]
    logger.debug("Running %s in %s", " ".join(cmd), directory)
    try:
        result = subprocess.run(
            cmd,
            cwd=directory,
            capture_output=True,
            text=True,
            check=True,
        )
    except OSError as e:
        raise TerraformError(f"failed to execute {cmd[0]}: {e}") from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        tail = "\n".join(stderr.splitlines()[-20:])
        if e.stdout:
            logger.debug("terraform %s stdout:\n%s", args[0], e.stdout)
        raise TerraformError(
            f"terraform {args[0]} exited with status {e.returncode}" + (f":\n{tail}" if tail else ""),
            returncode=e.returncode,
            stderr=stderr,
        ) from e
    if result.stdout:
        logger.debug("terraform %s stdout:\n%s", args[0], result.stdout)
    return result


def state_path(directory: str | Path) -> Path:
    """Where terraform writes its state inside ``directory``."""
    return Path(directory) / STATE_FILENAME


def init(directory: str | Path) -> None:
    """Run ``terraform init`` in ``directory``.

    Raises:
        TerraformError: If terraform is missing or exits non-zero
    """
    _run(Path(directory), "init", "-input=false", "-no-color")


def apply(directory: str | Path) -> Path:
    """Run ``terraform apply`` in ``directory``.

    Returns:
        Path to the resulting state file

    Raises:
        TerraformError: If terraform is missing or exits non-zero; the
            state file may still have been written
    """
    directory = Path(directory)
    _run(
        directory,
        "apply",
        "-auto-approve",
        "-input=false",
        "-no-color",
        f"-var-file={TFVARS_FILENAME}",
    )
    return state_path(directory)
