"""
Sample sources for runchart.

Turns either piped stdin or a periodically re-run shell command into one
async stream of text lines, and parses each line into an integer sample.

Usage:
    source = make_source(["cat", "/proc/loadavg", "|", "cut", "-c1"])
    async for value in samples(source):
        ...
"""

import asyncio
import re
import sys
from subprocess import DEVNULL, PIPE

from runchart_config import DEBUG, MAX_SAMPLE, POLL_INTERVAL, SHELL, STDIN_LINE_LIMIT

# Optional plus sign followed by ASCII digits only
_SAMPLE_RE = re.compile(r"\+?[0-9]+")


def report(message):
    """Print a diagnostic on stderr, stdout belongs to the chart"""
    print(f"[runchart] {message}", file=sys.stderr, flush=True)


def parse_sample(line):
    """
    Parse one line into a sample.

    Never raises: empty, non-numeric, negative or overflowing input all
    give 0 so every line still produces exactly one sample.
    """
    text = line.strip()
    if not _SAMPLE_RE.fullmatch(text):
        return 0
    value = int(text)
    if value > MAX_SAMPLE:
        return 0
    return value


def _decode(raw, origin):
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        report(f"{origin} produced invalid UTF-8: {e}")
        return None


class SourceConsumedError(RuntimeError):
    """Raised when a source is iterated a second time"""


class _Source:
    def __init__(self):
        self._consumed = False

    def _claim(self):
        if self._consumed:
            raise SourceConsumedError(f"{type(self).__name__} cannot be restarted")
        self._consumed = True

    def lines(self):
        raise NotImplementedError


class PipedSource(_Source):
    """Lines read from a pipe (stdin by default) until it closes."""

    def __init__(self, stream=None):
        super().__init__()
        self.stream = stream if stream is not None else sys.stdin

    async def lines(self):
        self._claim()
        loop = asyncio.get_running_loop()
        reader = asyncio.StreamReader(limit=STDIN_LINE_LIMIT)
        protocol = asyncio.StreamReaderProtocol(reader)

        try:
            transport, _ = await loop.connect_read_pipe(lambda: protocol, self.stream)
        except ValueError:
            # Regular files (`< data.txt`) can't be watched by the event loop
            async for line in self._read_file():
                yield line
            return

        try:
            while True:
                try:
                    raw = await reader.readline()
                except ValueError as e:
                    report(f"stdin line too long: {e}")
                    break
                if not raw:
                    break
                text = _decode(raw, "stdin")
                if text is None:
                    break
                yield text.strip()
        finally:
            transport.close()

    async def _read_file(self):
        binary = getattr(self.stream, "buffer", self.stream)
        for raw in binary:
            if isinstance(raw, bytes):
                raw = _decode(raw, "stdin")
                if raw is None:
                    return
            yield raw.strip()
            await asyncio.sleep(0)


class CommandSource(_Source):
    """
    Full stdout of a shell command, re-run forever.

    Each run yields one item, then waits `interval` seconds. A non-zero
    exit status keeps the loop going; failing to start the shell or
    getting non UTF-8 output ends it.
    """

    def __init__(self, command, interval=POLL_INTERVAL, shell=SHELL):
        super().__init__()
        self.command = command
        self.interval = interval
        self.shell = shell
        self.runs = 0

    async def run_once(self):
        """Run the command to completion and return its raw stdout"""
        process = await asyncio.create_subprocess_shell(
            self.command,
            stdin=DEVNULL,
            stdout=PIPE,
            stderr=DEVNULL,
            executable=self.shell,
        )
        stdout, _ = await process.communicate()
        self.runs += 1
        if process.returncode and DEBUG:
            report(f"'{self.command}' exited with status {process.returncode}")
        return stdout

    async def lines(self):
        self._claim()
        while True:
            try:
                stdout = await self.run_once()
            except OSError as e:
                report(f"Error {e}")
                return

            text = _decode(stdout, f"'{self.command}'")
            if text is None:
                return
            yield text

            await asyncio.sleep(self.interval)


def make_source(command_args=None, stream=None):
    """Command mode when arguments are given, piped mode otherwise"""
    if command_args:
        return CommandSource(" ".join(command_args))
    return PipedSource(stream)


async def samples(source):
    """One parsed sample per source line, in arrival order"""
    async for line in source.lines():
        yield parse_sample(line)
