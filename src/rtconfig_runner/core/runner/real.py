"""Real process runner using subprocess.Popen and drain threads."""

import logging
import os
import signal
import subprocess
import threading
import time
from typing import IO

from rtconfig_runner.core.invocation import Invocation
from rtconfig_runner.core.result import Completed, ExecutionResult, LaunchFailed, TimedOut
from rtconfig_runner.core.runner.abc import ProcessRunner

logger = logging.getLogger(__name__)

# Upper bound on waiting for pipes to close once the process group is killed
_KILL_GRACE_SECONDS = 5.0

_READ_CHUNK_SIZE = 64 * 1024


def _feed_stdin(stream: IO[bytes], data: bytes) -> None:
    """Write all input and close stdin so the process sees end of input."""
    try:
        if data:
            stream.write(data)
    except BrokenPipeError:
        # The tool exited (or was killed) without consuming its input
        logger.debug("stdin closed by process after partial write")
    except OSError as e:
        logger.warning("Writing input to process failed: %s", e)
    finally:
        try:
            stream.close()
        except OSError as e:
            logger.debug("stdin closed by process before flush: %s", e)


def _drain(stream: IO[bytes], chunks: list[bytes]) -> None:
    """Read stream until end of file, keeping each chunk as it arrives."""
    try:
        while True:
            chunk = os.read(stream.fileno(), _READ_CHUNK_SIZE)
            if not chunk:
                break
            chunks.append(chunk)
    finally:
        stream.close()


def _remaining(deadline: float | None) -> float | None:
    if deadline is None:
        return None
    return max(0.0, deadline - time.monotonic())


def _deadline(start_time: float, timeout_seconds: float | None) -> float | None:
    """Absolute deadline, or None when the timeout cannot be waited on."""
    if timeout_seconds is None:
        return None
    # Thread.join rejects waits beyond TIMEOUT_MAX; such a timeout never expires
    if timeout_seconds > threading.TIMEOUT_MAX:
        logger.debug("Timeout %ss exceeds wait limit, running without deadline", timeout_seconds)
        return None
    return start_time + timeout_seconds


class RealProcessRunner(ProcessRunner):
    """Production implementation.

    Implementation details:
    - argv is passed directly to Popen (shell=False); nothing is shell-parsed
    - stdin, stdout and stderr are private pipes
    - one thread writes stdin while two threads drain stdout and stderr, so
      a tool blocked on a full output pipe can never deadlock the runner
    - the tool runs in its own session; on timeout the whole process group
      is killed and reaped
    - if waiting is interrupted by an exception the process group is killed
      and reaped before the exception propagates
    """

    def run(
        self,
        invocation: Invocation,
        input_bytes: bytes,
        timeout_seconds: float | None = None,
    ) -> ExecutionResult:
        start_time = time.monotonic()
        deadline = _deadline(start_time, timeout_seconds)

        logger.debug(
            "Launching %s (input=%d bytes, timeout=%s)",
            invocation.command_line,
            len(input_bytes),
            timeout_seconds,
        )
        try:
            process = subprocess.Popen(
                invocation.argv,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=True,
            )
        except (OSError, ValueError) as e:
            detail = e.strerror if isinstance(e, OSError) and e.strerror else str(e)
            reason = f"{invocation.executable}: {detail}"
            logger.warning("Failed to launch %s: %s", invocation.executable, reason)
            return ExecutionResult(
                invocation=invocation,
                outcome=LaunchFailed(reason=reason),
                duration_seconds=time.monotonic() - start_time,
            )

        assert process.stdin is not None
        assert process.stdout is not None
        assert process.stderr is not None

        stdout_chunks: list[bytes] = []
        stderr_chunks: list[bytes] = []
        writer = threading.Thread(
            target=_feed_stdin, args=(process.stdin, input_bytes), daemon=True
        )
        readers = [
            threading.Thread(target=_drain, args=(process.stdout, stdout_chunks), daemon=True),
            threading.Thread(target=_drain, args=(process.stderr, stderr_chunks), daemon=True),
        ]
        writer.start()
        for reader in readers:
            reader.start()

        try:
            exit_code = self._wait(process, readers, deadline)
        except BaseException:
            logger.warning("Interrupted while waiting for %s, killing it", invocation.executable)
            self._kill(process)
            process.wait()
            raise

        timed_out = exit_code is None
        if timed_out:
            logger.warning(
                "%s exceeded %ss deadline, killing process group %d",
                invocation.executable,
                timeout_seconds,
                process.pid,
            )
            self._kill(process)
            process.wait()
            for reader in readers:
                reader.join(_KILL_GRACE_SECONDS)
            if any(reader.is_alive() for reader in readers):
                # A process outside the killed group still holds the pipes; the
                # reader closes its stream once that process lets go
                logger.warning(
                    "Output pipes of %s still open after kill, returning partial output",
                    invocation.executable,
                )

        writer.join(_KILL_GRACE_SECONDS)
        duration = time.monotonic() - start_time

        # Copy first: an abandoned reader may still be appending
        stdout = b"".join(list(stdout_chunks))
        stderr = b"".join(list(stderr_chunks))

        if exit_code is None:
            assert timeout_seconds is not None
            outcome: Completed | TimedOut = TimedOut(timeout_seconds=timeout_seconds)
        else:
            outcome = Completed(exit_code=exit_code)
            logger.debug(
                "%s exited with %d after %.3fs (stdout=%d bytes, stderr=%d bytes)",
                invocation.executable,
                exit_code,
                duration,
                len(stdout),
                len(stderr),
            )

        return ExecutionResult(
            invocation=invocation,
            outcome=outcome,
            stdout=stdout,
            stderr=stderr,
            pid=process.pid,
            duration_seconds=duration,
        )

    def _wait(
        self,
        process: subprocess.Popen[bytes],
        readers: list[threading.Thread],
        deadline: float | None,
    ) -> int | None:
        """Wait for end of output and exit. Returns None if the deadline passed."""
        for reader in readers:
            reader.join(_remaining(deadline))
            if reader.is_alive():
                return None
        try:
            return process.wait(timeout=_remaining(deadline))
        except subprocess.TimeoutExpired:
            return None

    def _kill(self, process: subprocess.Popen[bytes]) -> None:
        """Kill the process and everything it spawned."""
        if os.name != "posix":
            process.kill()
            return
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            logger.debug("Process group %d already gone", process.pid)
