"""nfsmon - per-mount NFS client metrics collector"""

__version__ = "0.1.0"
