"""NFS mountstats field tables.

Each statistics line in /proc/self/mountstats carries positional numeric values.
The tables below name those positions, in order, per statistics category.
"""

from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

# 'events:' line
EVENTS_FIELDS: Tuple[str, ...] = (
    "inoderevalidates",
    "dentryrevalidates",
    "datainvalidates",
    "attrinvalidates",
    "vfsopen",
    "vfslookup",
    "vfspermission",
    "vfsupdatepage",
    "vfsreadpage",
    "vfsreadpages",
    "vfswritepage",
    "vfswritepages",
    "vfsreaddir",
    "vfssetattr",
    "vfsflush",
    "vfsfsync",
    "vfslock",
    "vfsrelease",
    "congestionwait",
    "setattrtrunc",
    "extendwrite",
    "sillyrenames",
    "shortreads",
    "shortwrites",
    "delay",
    "pnfsreads",
    "pnfswrites",
)

# 'bytes:' line
BYTES_FIELDS: Tuple[str, ...] = (
    "normalreadbytes",
    "normalwritebytes",
    "directreadbytes",
    "directwritebytes",
    "serverreadbytes",
    "serverwritebytes",
    "readpages",
    "writepages",
)

# 'xprt: tcp <port> ...' line, values after the source port
XPRT_TCP_FIELDS: Tuple[str, ...] = (
    "bind_count",
    "connect_count",
    "connect_time",
    "idle_time",
    "rpcsends",
    "rpcreceives",
    "badxids",
    "inflightsends",
    "backlogutil",
)

# 'xprt: udp <port> ...' line, values after the source port
XPRT_UDP_FIELDS: Tuple[str, ...] = (
    "bind_count",
    "rpcsends",
    "rpcreceives",
    "badxids",
    "inflightsends",
    "backlogutil",
)

NFS3_OPERATIONS: Tuple[str, ...] = (
    "NULL", "GETATTR", "SETATTR", "LOOKUP", "ACCESS", "READLINK",
    "READ", "WRITE", "CREATE", "MKDIR", "SYMLINK", "MKNOD",
    "REMOVE", "RMDIR", "RENAME", "LINK", "READDIR", "READDIRPLUS",
    "FSSTAT", "FSINFO", "PATHCONF", "COMMIT",
)

NFS4_OPERATIONS: Tuple[str, ...] = (
    "NULL", "READ", "WRITE", "COMMIT", "OPEN", "OPEN_CONFIRM",
    "OPEN_NOATTR", "OPEN_DOWNGRADE", "CLOSE", "SETATTR", "FSINFO", "RENEW",
    "SETCLIENTID", "SETCLIENTID_CONFIRM", "LOCK", "LOCKT", "LOCKU", "ACCESS",
    "GETATTR", "LOOKUP", "LOOKUP_ROOT", "REMOVE", "RENAME", "LINK",
    "SYMLINK", "CREATE", "PATHCONF", "STATFS", "READLINK", "READDIR",
    "SERVER_CAPS", "DELEGRETURN", "GETACL", "SETACL", "FS_LOCATIONS",
    "RELEASE_LOCKOWNER", "SECINFO", "FSID_PRESENT", "EXCHANGE_ID",
    "CREATE_SESSION", "DESTROY_SESSION", "SEQUENCE", "GET_LEASE_TIME",
    "RECLAIM_COMPLETE", "LAYOUTGET", "GETDEVICEINFO", "LAYOUTCOMMIT",
    "LAYOUTRETURN", "SECINFO_NO_NAME", "TEST_STATEID", "FREE_STATEID",
    "GETDEVICELIST", "BIND_CONN_TO_SESSION", "DESTROY_CLIENTID", "SEEK",
    "ALLOCATE", "DEALLOCATE", "LAYOUTSTATS", "CLONE",
)

# Per-operation line: 'READ: ops trans timeouts bytes_sent ...'
NFSOP_FIELDS: Tuple[str, ...] = (
    "ops",
    "trans",
    "timeouts",
    "bytes_sent",
    "bytes_recv",
    "queue_time",
    "response_time",
    "total_time",
)

OPERATIONS_BY_VERSION: Dict[str, FrozenSet[str]] = {
    "3": frozenset(NFS3_OPERATIONS),
    "4": frozenset(NFS4_OPERATIONS),
}


class StatCategory(Enum):
    """Closed set of statistics categories found in mountstats"""
    EVENTS = "events"
    BYTES = "bytes"
    XPRT_TCP = "xprt_tcp"
    XPRT_UDP = "xprt_udp"
    NFS3_OP = "nfs3_op"
    NFS4_OP = "nfs4_op"

    @property
    def fields(self) -> Tuple[str, ...]:
        return _CATEGORY_FIELDS[self]

    @property
    def measurement(self) -> str:
        if self in (StatCategory.NFS3_OP, StatCategory.NFS4_OP):
            return "nfs_ops"
        return f"nfs_{self.value}"


_CATEGORY_FIELDS: Dict[StatCategory, Tuple[str, ...]] = {
    StatCategory.EVENTS: EVENTS_FIELDS,
    StatCategory.BYTES: BYTES_FIELDS,
    StatCategory.XPRT_TCP: XPRT_TCP_FIELDS,
    StatCategory.XPRT_UDP: XPRT_UDP_FIELDS,
    StatCategory.NFS3_OP: NFSOP_FIELDS,
    StatCategory.NFS4_OP: NFSOP_FIELDS,
}

_VERSION_CATEGORY: Dict[str, StatCategory] = {
    "3": StatCategory.NFS3_OP,
    "4": StatCategory.NFS4_OP,
}

# Category names as they appear in mountstats, as opposed to the per-operation kinds
_STANDALONE_CATEGORIES: Dict[str, StatCategory] = {
    category.value: category
    for category in (StatCategory.EVENTS, StatCategory.BYTES, StatCategory.XPRT_TCP, StatCategory.XPRT_UDP)
}


def is_operation(name: str, version: Optional[str]) -> bool:
    """Check if name is an NFS operation of the given protocol version"""
    return name in OPERATIONS_BY_VERSION.get(version, frozenset())


def operation_category(name: str, version: Optional[str]) -> Optional[StatCategory]:
    """Return the per-operation category for name under version, if any"""
    if not is_operation(name, version):
        return None
    return _VERSION_CATEGORY[version]


def lookup(category: str) -> Optional[Tuple[str, ...]]:
    """
    Return the ordered metric names for a category name.

    Accepts the standalone categories (events, bytes, xprt_tcp, xprt_udp)
    and any NFSv3/NFSv4 operation name. Unknown names return None.
    """
    if category in _STANDALONE_CATEGORIES:
        return _STANDALONE_CATEGORIES[category].fields

    if category in OPERATIONS_BY_VERSION["3"] or category in OPERATIONS_BY_VERSION["4"]:
        return NFSOP_FIELDS
    return None
