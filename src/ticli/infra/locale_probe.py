"""Host locale detection through platform tools.

Windows
    ``reg query`` for the user's locale id, then a second query mapping
    that id to an RFC 1766 tag (``en-US``).
Everything else
    ``locale``; the ``LANG`` value of its first line without the
    encoding suffix (``en_US.UTF-8`` becomes ``en_US``).

Rules
-----
* Every failure (missing tool, non-zero exit, unexpected output) yields
  ``""``; nothing raises.
* Each child process is bounded by a timeout and killed when it expires
  or when the caller cancels the probe.
"""

from __future__ import annotations

import asyncio
import logging
import re
import sys

logger = logging.getLogger(__name__)

PROCESS_TIMEOUT: float = 3.0

_WINDOWS_LOCALE_RE = re.compile(r"Locale\s+REG_SZ\s+(.+)")
_WINDOWS_RFC1766_RE = re.compile(r"REG_SZ\s+([^;,\n]+?);")
_POSIX_LANG_RE = re.compile(r"LANG=[\"']?([^.\"'\s]+)")


# ---------------------------------------------------------------------------
# Output parsers (pure)
# ---------------------------------------------------------------------------

def parse_posix_locale(stdout: str) -> str:
    """Return the language of the first ``locale`` line, or ``""``."""
    first = stdout.split("\n", 1)[0]
    match = _POSIX_LANG_RE.search(first)
    if match is None or match.group(1) in ("C", "POSIX"):
        return ""
    return match.group(1)


def parse_windows_locale_id(stdout: str) -> str:
    """Return the last four hex digits of the ``Locale`` value, or ``""``."""
    match = _WINDOWS_LOCALE_RE.search(stdout)
    if match is None:
        return ""
    return match.group(1).strip()[-4:]


def parse_windows_rfc1766(stdout: str) -> str:
    match = _WINDOWS_RFC1766_RE.search(stdout)
    return match.group(1).strip() if match else ""


# ---------------------------------------------------------------------------
# Process helpers
# ---------------------------------------------------------------------------

async def _run(*command: str, timeout: float = PROCESS_TIMEOUT) -> str | None:
    """Run *command* and return its stdout, or ``None`` on any failure."""
    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError as exc:
        logger.debug("Cannot run %s: %s", command[0], exc)
        return None

    try:
        stdout, _ = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        logger.debug("%s timed out after %.1fs", command[0], timeout)
        return None
    finally:
        # Also reached when the caller cancels us.
        if process.returncode is None:
            await _kill(process)

    if process.returncode != 0:
        return None
    return stdout.decode(errors="replace")


async def _kill(process: asyncio.subprocess.Process) -> None:
    try:
        process.kill()
    except ProcessLookupError:
        pass
    await process.wait()


# ---------------------------------------------------------------------------
# Public probe
# ---------------------------------------------------------------------------

async def probe_windows_locale() -> str:
    stdout = await _run("reg", "query", r"HKCU\Control Panel\International", "/v", "Locale")
    locale_id = parse_windows_locale_id(stdout or "")
    if not locale_id:
        return ""
    stdout = await _run(
        "reg", "query", r"HKLM\SOFTWARE\Classes\MIME\Database\Rfc1766", "/v", locale_id,
    )
    return parse_windows_rfc1766(stdout or "")


async def probe_posix_locale() -> str:
    stdout = await _run("locale")
    return parse_posix_locale(stdout or "")


async def probe_system_locale() -> str:
    """Detect the host locale using the current platform's mechanism."""
    if sys.platform == "win32":
        return await probe_windows_locale()
    return await probe_posix_locale()
