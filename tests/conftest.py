"""Pytest configuration and shared fixtures"""
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


def _numbers(*values, zeros=0):
    return " ".join([str(v) for v in values] + ["0"] * zeros)


HOME_EVENTS = _numbers(301736, 22838, 410979, 301736, 301736, 1, 3, zeros=20)
SCRATCH_EVENTS = _numbers(*range(10, 280, 10))
ARCHIVE_EVENTS = _numbers(zeros=27)

# Three NFS mounts (v3 over tcp, v4 over tcp, v3 over udp) between non-NFS mounts
MOUNTSTATS_SAMPLE = f"""\
device rootfs mounted on / with fstype rootfs
device proc mounted on /proc with fstype proc
device nfs-server:/export/home mounted on /home with fstype nfs statvers=1.1
\topts:\trw,vers=3,rsize=1048576,wsize=1048576,namlen=255,hard,proto=tcp,timeo=600,retrans=2,sec=sys
\tage:\t1234
\tcaps:\tcaps=0x3fc7,wtmult=4096,dtsize=1048576,bsize=0,namlen=255
\tsec:\tflavor=1,pseudoflavor=1
\tevents:\t{HOME_EVENTS}
\tbytes:\t204440464 0 0 0 204440464 0 49912 0
\tRPC iostats version: 1.0  p/v: 100003/3 (nfs)
\txprt:\ttcp 733 1 1 0 0 96099 96099 0 96099 0 2 0 0
\tper-op statistics
\t        NULL: 0 0 0 0 0 0 0 0
\t     GETATTR: 100 100 0 13200 11200 0 50 60
\t        READ: 1500 1501 0 198000 204635000 10 4000 4200
\t       WRITE: 20 22 0 40960 2880 0 30 35
\t      COMMIT: 0 0 0 0 0 0 0 0

device nfs4-server:/scratch mounted on /mnt/scratch with fstype nfs4 statvers=1.1
\topts:\trw,vers=4.2,rsize=1048576,wsize=1048576,namlen=255,hard,proto=tcp,timeo=600,retrans=2,sec=sys
\tevents:\t{SCRATCH_EVENTS}
\tbytes:\t1 2 3 4 5 6 7 8
\tRPC iostats version: 1.0  p/v: 100003/4 (nfs)
\txprt:\ttcp 0 1 2 3 4 5 6 7 8 9 10 11 12
\tper-op statistics
\t        NULL: 1 1 0 44 24 0 0 0
\t        READ: 10 10 0 1840 409600 0 15 16 0
\t       WRITE: 5 6 0 20960 800 1 12 14 0
\t        OPEN: 3 3 0 900 1200 0 4 5 0
\t   LAYOUTGET: 0 0 0 0 0 0 0 0 0

device sysfs mounted on /sys with fstype sysfs
device legacy:/archive mounted on /mnt/archive with fstype nfs statvers=1.1
\tevents:\t{ARCHIVE_EVENTS}
\tbytes:\t0 0 0 0 0 0 0 0
\tRPC iostats version: 1.0  p/v: 100003/3 (nfs)
\txprt:\tudp 832 0 96099 96099 0 96099 0
\tper-op statistics
\t        READ: 7 9 0 1000 2000 0 11 13
"""


@pytest.fixture
def mountstats_lines():
    """Sample mountstats content as a list of lines"""
    return MOUNTSTATS_SAMPLE.splitlines()


@pytest.fixture
def mountstats_file(tmp_path):
    """Sample mountstats content written to a temporary file"""
    path = tmp_path / "mountstats"
    path.write_text(MOUNTSTATS_SAMPLE)
    return path
