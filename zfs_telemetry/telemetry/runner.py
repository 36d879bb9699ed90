"""
Subprocess-backed command runner.

Programs are executed directly from argv, never through a shell, so shell
metacharacters in arguments are literal values.
"""

import asyncio
import logging

from zfs_telemetry.telemetry.errors import CommandError

logger = logging.getLogger(__name__)


class SubprocessRunner:
    """Production CommandRunner using asyncio subprocesses."""

    async def run(self, program: str, *args: str) -> bytes:
        logger.debug(f"Running command: {program} {' '.join(args)}")
        try:
            proc = await asyncio.create_subprocess_exec(
                program,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise CommandError(program, args, reason=str(e)) from e

        try:
            stdout, stderr = await proc.communicate()
        except asyncio.CancelledError:
            # Deadline hit: do not leave the child running.
            if proc.returncode is None:
                try:
                    proc.kill()
                except ProcessLookupError:
                    pass
                await proc.wait()
            logger.debug(f"Killed {program} after cancellation")
            raise

        if proc.returncode != 0:
            raise CommandError(
                program,
                args,
                returncode=proc.returncode,
                output=stdout,
                stderr=stderr,
            )

        return stdout
