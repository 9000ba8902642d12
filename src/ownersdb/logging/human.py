"""
Human Log: formatter and helper for progress lines.

Example output of a cache run::

    Changed ports (2): zlib, fmt
    Downloading https://acct.blob.core.windows.net/cache/4f1c.zip?<redacted> for port zlib...
      zlib: 14 files
    Downloading https://acct.blob.core.windows.net/cache/9a0b.zip?<redacted> for port fmt...
      fmt: 27 files
    ✓ Wrote scripts/list_files/VCPKGDatabase.txt (41 records) and
      scripts/list_files/VCPKGHeadersDatabase.txt (22 headers)
"""

import logging
import sys

import structlog

from .levels import HUMAN

# LogRecord attributes that are never event parameters
_RECORD_ATTRS = frozenset({
    "msg", "args", "levelname", "levelno", "pathname", "filename", "module",
    "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created",
    "msecs", "relativeCreated", "thread", "threadName", "processName",
    "process", "message", "taskName", "name", "event",
})


class HumanFormatter:
    """Turns structured progress events into readable lines."""

    def format_event(self, event: str, **kw) -> str | None:
        """Format an event.

        Returns:
            The text to print, or None for events without a human format.
        """
        match event:

            # ── LOCAL ────────────────────────────────────────────────────
            case "local.scan.start":
                listing_dir = kw.get("listing_dir", "?")
                files = kw.get("files", "?")
                return f"Scanning {listing_dir} ({files} listing files)"

            # ── CACHE ────────────────────────────────────────────────────
            case "cache.no_changes":
                ports_dir = kw.get("ports_dir", "ports")
                git_range = kw.get("range", "?")
                return (
                    f"git diff found no changed ports under {ports_dir}/ "
                    f"for range {git_range}; nothing to index"
                )

            case "cache.changed_ports":
                ports = kw.get("ports") or []
                return f"Changed ports ({len(ports)}): {', '.join(ports)}"

            case "cache.download":
                port = kw.get("port", "?")
                url = kw.get("url", "?")
                return f"Downloading {url} for port {port}..."

            case "cache.port.indexed":
                port = kw.get("port", "?")
                files = kw.get("files", "?")
                return f"  {port}: {files} files"

            # ── OUTPUT ───────────────────────────────────────────────────
            case "output.written":
                return (
                    f"✓ Wrote {kw.get('database', '?')} ({kw.get('records', '?')} records) "
                    f"and {kw.get('headers', '?')} ({kw.get('header_records', '?')} headers)"
                )

            case "run.skipped_summary":
                skipped = kw.get("skipped") or []
                return f"⚠  Skipped {len(skipped)} port(s): {', '.join(skipped)}"

            case _:
                return None


class HumanLogHandler(logging.Handler):
    """Logging handler that prints HUMAN events in readable form.

    Only handles records of level HUMAN (25). Writes to stderr so stdout
    stays clean.
    """

    def __init__(self, stream=None) -> None:
        super().__init__(level=HUMAN)
        self.stream = stream or sys.stderr
        self.formatter_inst = HumanFormatter()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            if record.levelno != HUMAN:
                return

            # structlog hands over the event dict via ProcessorFormatter.wrap_for_formatter
            if isinstance(record.msg, dict):
                kw = {k: v for k, v in record.msg.items() if not k.startswith("_")}
                event = kw.pop("event", None)
            else:
                event = getattr(record, "event", None) or record.getMessage()
                kw = {
                    k: v for k, v in record.__dict__.items()
                    if not k.startswith("_") and k not in _RECORD_ATTRS
                }

            formatted = self.formatter_inst.format_event(str(event), **kw)
            if formatted is not None:
                self.stream.write(formatted + "\n")
                self.stream.flush()
        except Exception:
            self.handleError(record)


class HumanLog:
    """Typed helper for emitting HUMAN-level events.

    Usage:
        hlog = HumanLog(structlog.get_logger())
        hlog.download("zlib", "https://.../4f1c.zip?<redacted>")
    """

    def __init__(self, logger) -> None:
        self._log = logger

    def _emit(self, event: str, **kw) -> None:
        human = getattr(self._log, "human", None)
        if human is None:
            # structlog not configured by configure_logging() (library use, tests)
            self._log.info(event, **kw)
            return
        human(event, **kw)

    def scan_start(self, listing_dir: str, files: int) -> None:
        self._emit("local.scan.start", listing_dir=listing_dir, files=files)

    def no_changes(self, git_range: str, ports_dir: str) -> None:
        self._emit("cache.no_changes", range=git_range, ports_dir=ports_dir)

    def changed_ports(self, ports: list[str]) -> None:
        self._emit("cache.changed_ports", ports=list(ports))

    def download(self, port: str, url: str) -> None:
        self._emit("cache.download", port=port, url=url)

    def port_indexed(self, port: str, files: int) -> None:
        self._emit("cache.port.indexed", port=port, files=files)

    def written(self, database: str, headers: str, records: int, header_records: int) -> None:
        self._emit(
            "output.written",
            database=database,
            headers=headers,
            records=records,
            header_records=header_records,
        )

    def skipped_summary(self, skipped: list[str]) -> None:
        self._emit("run.skipped_summary", skipped=list(skipped))


class HumanBoundLogger(structlog.stdlib.BoundLogger):
    """stdlib BoundLogger with a ``human()`` method for the HUMAN level."""

    def human(self, event: str | None = None, *args, **kw):
        return self._proxy_to_logger("human", event, *args, **kw)
