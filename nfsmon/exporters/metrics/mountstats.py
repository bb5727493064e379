"""
Parser for the per-mount NFS statistics file (/proc/self/mountstats).

The file is a sequence of blocks, one per mounted filesystem:

    device srv:/export mounted on /mnt/data with fstype nfs statvers=1.1
        opts:   rw,vers=3,rsize=1048576,...
        ...
        events: 2 112 0 0 1 5 129 0 0 0 0 0 0 1 0 0 0 0 0 0 0 0 0 0 0 0 0
        bytes:  0 0 0 0 0 0 0 0
        RPC iostats version: 1.0  p/v: 100003/3 (nfs)
        xprt:   tcp 875 1 1 0 0 16 16 0 0 0 0 0 0 0
        per-op statistics
                NULL: 0 0 0 0 0 0 0 0
             GETATTR: 4 4 0 528 448 0 1 1
                ...

Lines are scanned in order. Mount lines and version lines update the running
MountContext; every other line is decoded against the field tables for the
mount it belongs to.
"""
import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .base import MetricRecord, MetricSink
from .mount_filter import MountFilter
from .nfs_fields import (
    BYTES_FIELDS,
    EVENTS_FIELDS,
    NFSOP_FIELDS,
    StatCategory,
    operation_category,
)

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_INT_RE = re.compile(r"^[+-]?[0-9]+$")

# Numeric values on an xprt line start after the transport name and source port
XPRT_VALUE_OFFSET = 2

XPRT_TABLES = {
    "tcp": StatCategory.XPRT_TCP,
    "udp": StatCategory.XPRT_UDP,
}


class MountstatsReadError(Exception):
    """The mountstats file could not be opened or read"""

    def __init__(self, path: str, error: Exception):
        super().__init__(f"Failed reading {path}: {error}")
        self.path = path
        self.error = error


class LineKind(Enum):
    MOUNT = "mount"
    VERSION = "version"
    DATA = "data"


@dataclass(frozen=True)
class MountContext:
    """Where the scanner is: which mount, export and protocol version lines belong to"""
    mountpoint: str = ""
    export: str = ""
    version: Optional[str] = None
    skip: bool = False

    @property
    def tags(self) -> dict:
        return {"mountpoint": self.mountpoint, "serverexport": self.export}


# ---------- Line classification ----------

def is_mount_line(tokens: Sequence[str]) -> bool:
    """'device <export> mounted on <mountpoint> with fstype nfs[4] ...'"""
    return "fstype" in tokens and ("nfs" in tokens or "nfs4" in tokens) and len(tokens) > 4


def is_version_line(tokens: Sequence[str]) -> bool:
    """'RPC iostats version: 1.0 p/v: 100003/<version> (nfs)'"""
    return ("(nfs)" in tokens or "(nfs4)" in tokens) and len(tokens) > 5


def parse_version(tokens: Sequence[str]) -> Optional[str]:
    parts = tokens[5].split("/")
    if len(parts) < 2:
        return None
    return parts[1]


def classify_line(tokens: Sequence[str]) -> Tuple[LineKind, ...]:
    """
    Return every kind the line matches.

    Mount and version detection are independent of each other, and any
    non-empty line is also offered to the decoder as data.
    """
    kinds = []
    if is_mount_line(tokens):
        kinds.append(LineKind.MOUNT)
    if is_version_line(tokens):
        kinds.append(LineKind.VERSION)
    if tokens:
        kinds.append(LineKind.DATA)
    return tuple(kinds)


def category_name(tokens: Sequence[str]) -> str:
    return tokens[0].replace(":", "", 1)


def advance_context(context: MountContext, tokens: Sequence[str], mount_filter: MountFilter) -> MountContext:
    """Return the context that applies to this line and the ones after it"""
    kinds = classify_line(tokens)

    if LineKind.MOUNT in kinds:
        mountpoint = tokens[4]
        context = MountContext(
            mountpoint=mountpoint,
            export=tokens[1],
            version=None,
            skip=mount_filter.should_skip(mountpoint),
        )

    if LineKind.VERSION in kinds:
        version = parse_version(tokens)
        if version is not None:
            context = replace(context, version=version)

    return context


# ---------- Decoding ----------

def parse_int(token: str) -> Tuple[int, bool]:
    """
    Best-effort signed 64-bit parse.

    Returns (value, True) for a valid decimal integer, (0, False) otherwise.
    """
    if not _INT_RE.match(token):
        return 0, False
    value = int(token)
    if value < INT64_MIN or value > INT64_MAX:
        return 0, False
    return value, True


def convert(tokens: Sequence[str]) -> List[int]:
    """Numeric values of every token after the category name"""
    return [parse_int(token)[0] for token in tokens[1:]]


def _positional(category: StatCategory, values: Sequence[int], offset: int = 0) -> Dict[str, int]:
    return dict(zip(category.fields, values[offset:offset + len(category.fields)]))


def _read_write_record(operation: str, values: Sequence[int], tags: dict) -> MetricRecord:
    prefix = operation.lower()
    fields = {
        f"{prefix}_ops": values[0],
        f"{prefix}_retrans": values[1] - values[0],
        f"{prefix}_bytes": values[3] + values[4],
        f"{prefix}_rtt": values[6],
        f"{prefix}_exe": values[7],
    }
    return MetricRecord(f"nfsstat_{prefix}", tags, fields)


def decode_stat(tokens: Sequence[str], context: MountContext, fullstat: bool) -> List[MetricRecord]:
    """
    Decode one statistics line in the given mount context.

    Returns zero, one or two records. Lines that are too short, unknown, or
    belong to a mount with no recognised NFS version produce nothing.
    """
    if not tokens:
        return []

    first = category_name(tokens)
    values = convert(tokens)
    tags = context.tags

    if fullstat and first == "events" and len(values) >= len(EVENTS_FIELDS):
        return [MetricRecord("nfs_events", tags, _positional(StatCategory.EVENTS, values))]

    if fullstat and first == "bytes" and len(values) >= len(BYTES_FIELDS):
        return [MetricRecord("nfs_bytes", tags, _positional(StatCategory.BYTES, values))]

    if fullstat and first == "xprt" and len(tokens) > 1:
        category = XPRT_TABLES.get(tokens[1])
        if category is None or len(values) < len(category.fields) + XPRT_VALUE_OFFSET:
            return []
        fields = _positional(category, values, XPRT_VALUE_OFFSET)
        return [MetricRecord(category.measurement, tags, fields)]

    category = operation_category(first, context.version)
    if category is None:
        return []

    records = []
    if first in ("READ", "WRITE") and len(values) >= len(NFSOP_FIELDS):
        records.append(_read_write_record(first, values, tags))

    if fullstat and 0 < len(values) <= len(NFSOP_FIELDS):
        fields = {f"{first}_{name}": value for name, value in zip(category.fields, values)}
        records.append(MetricRecord(category.measurement, tags, fields))

    return records


# ---------- Scanning ----------

def _read_lines(path: str) -> Iterator[str]:
    """Yield lines of path; only errors from the file itself become MountstatsReadError"""
    try:
        with open(path, "r", errors="replace") as f:
            yield from f
    except OSError as e:
        raise MountstatsReadError(path, e) from e


class MountstatsParser:
    """
    Turns mountstats lines into MetricRecords.

    Every call to parse() starts from an empty MountContext, so repeated scans
    of the same input with the same settings yield the same records.
    """

    def __init__(self, fullstat: bool = False, include_mounts: Sequence[str] = (),
                 exclude_mounts: Sequence[str] = ()):
        self.fullstat = fullstat
        self.mount_filter = MountFilter(include_mounts, exclude_mounts)

    def parse(self, lines: Iterable[str], sink: MetricSink) -> int:
        """Scan lines, calling sink for each record. Returns the number of records."""
        # Lines before the first mount line are filtered as a mount with an empty mount point
        context = MountContext(skip=self.mount_filter.should_skip(""))
        emitted = 0

        for line in lines:
            tokens = line.split()
            context = advance_context(context, tokens, self.mount_filter)

            if context.skip or not tokens:
                continue

            for record in decode_stat(tokens, context, self.fullstat):
                sink(record)
                emitted += 1

        return emitted

    def parse_records(self, lines: Iterable[str]) -> List[MetricRecord]:
        records: List[MetricRecord] = []
        self.parse(lines, records.append)
        return records

    def parse_file(self, path: str, sink: MetricSink) -> int:
        """
        Scan the file at path.

        Raises MountstatsReadError if it cannot be opened or read. Records
        passed to sink before the failure are not taken back.
        """
        return self.parse(_read_lines(path), sink)
