"""Uploading the staged site to Azure blob storage.

Wraps the ``pyazblob`` CLI via subprocess, one invocation per target::

    pyazblob upload --path .build/ --account-name <account> -cn '$web' -r -f

The account key is handed to the child process through the
``PYAZ_ACCOUNT_KEY`` environment variable. It never appears on the command
line, in results, or in log events.

Targets are uploaded in order and the run stops at the first failure, the
way consecutive CI steps do.

Tags:
    publish, azure, blob-storage, subprocess, upload
"""

from __future__ import annotations

import os
import shutil
import subprocess
import time
from pathlib import Path

from sitepub.build.config import PublishTarget
from sitepub.core.errors import PublishError, ToolNotFoundError
from sitepub.core.logging import get_logger
from sitepub.results import OverallStatus, UploadResult

logger = get_logger(__name__)

ACCOUNT_KEY_VARIABLE = "PYAZ_ACCOUNT_KEY"


class BlobPublisher:
    """Uploads a directory tree to blob storage targets.

    Parameters
    ----------
    timeout
        Seconds allowed per upload.

    Example::

        publisher = BlobPublisher()
        results = publisher.publish(Path(".build"), config.targets(settings))
    """

    def __init__(self, timeout: int = 1800) -> None:
        self.timeout = timeout
        self._cli: str | None = None

    @staticmethod
    def is_available() -> bool:
        return shutil.which("pyazblob") is not None

    def _find_cli(self) -> str:
        if self._cli is None:
            cli = shutil.which("pyazblob")
            if cli is None:
                raise ToolNotFoundError("pyazblob", "Install it with: pip install sitepub[publish]")
            self._cli = cli
        return self._cli

    @staticmethod
    def command(cli: str, path: Path, target: PublishTarget) -> list[str]:
        """Command line for one upload (without credentials)."""
        return [
            cli, "upload",
            "--path", str(path).rstrip("/") + "/",
            "--account-name", target.account_name,
            "-cn", target.container,
            "-r",
            "-f",
        ]

    def upload(self, path: Path, target: PublishTarget) -> UploadResult:
        """Upload ``path`` to one target."""
        result = UploadResult(
            target=target.name,
            account_name=target.account_name,
            container=target.container,
            path=str(path),
        )
        cmd = self.command(self._find_cli(), path, target)
        env = {**os.environ, ACCOUNT_KEY_VARIABLE: target.account_key.get_secret_value()}

        logger.info(
            "publish.upload_started",
            target=target.name,
            account_name=target.account_name,
            container=target.container,
            path=str(path),
        )
        start = time.time()
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=env,
            )
        except subprocess.TimeoutExpired:
            result.duration_seconds = time.time() - start
            result.status = OverallStatus.FAILED
            result.error = f"Upload timed out after {self.timeout}s"
            logger.error("publish.upload_timeout", target=target.name, timeout=self.timeout)
            return result

        result.duration_seconds = time.time() - start
        result.exit_code = proc.returncode
        result.stdout = proc.stdout[-2000:]
        result.stderr = proc.stderr[-2000:]

        if proc.returncode == 0:
            result.status = OverallStatus.PASSED
            logger.info(
                "publish.upload_complete",
                target=target.name,
                duration=round(result.duration_seconds, 2),
            )
        else:
            result.status = OverallStatus.FAILED
            tail = proc.stderr.strip().splitlines()[-1] if proc.stderr.strip() else ""
            result.error = f"pyazblob exited with code {proc.returncode}" + (f": {tail}" if tail else "")
            logger.error(
                "publish.upload_failed",
                target=target.name,
                exit_code=proc.returncode,
                stderr=result.stderr,
            )
        return result

    def publish(
        self,
        path: Path,
        targets: list[PublishTarget],
        dry_run: bool = False,
    ) -> list[UploadResult]:
        """Upload ``path`` to each target in order, stopping at the first failure."""
        if not path.is_dir():
            raise PublishError(
                f"Nothing to publish: {path} does not exist. Run the build first.",
                retryable=False,
            ).with_context(step="upload", path=str(path))

        results: list[UploadResult] = []
        for target in targets:
            if dry_run:
                logger.info("publish.dry_run", target=target.name, account_name=target.account_name)
                results.append(
                    UploadResult(
                        target=target.name,
                        account_name=target.account_name,
                        container=target.container,
                        path=str(path),
                        status=OverallStatus.SKIPPED,
                    )
                )
                continue

            result = self.upload(path, target)
            results.append(result)
            if result.status != OverallStatus.PASSED:
                break
        return results


__all__ = ["ACCOUNT_KEY_VARIABLE", "BlobPublisher"]
