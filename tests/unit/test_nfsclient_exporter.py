"""Unit tests for the NFS client exporter and metrics manager"""
import asyncio
import logging
from unittest.mock import patch

from nfsmon.exporters.metrics.base import MetricRecord
from nfsmon.exporters.metrics.manager import MetricsCollectorManager
from nfsmon.exporters.metrics.nfsclient import NFSClientExporter
from nfsmon.exporters.utils import DEFAULT_MOUNTSTATS_PATH, get_mountstats_path, is_mountstats_available


class FailingFile:
    """File object that yields some lines and then fails mid-read"""

    def __init__(self, lines):
        self.lines = lines

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def __iter__(self):
        yield from self.lines
        raise OSError(5, "Input/output error")


class TestMountstatsPath:
    """Test source location resolution"""

    def test_default_path(self, monkeypatch):
        monkeypatch.delenv("MOUNT_PROC", raising=False)
        assert get_mountstats_path() == DEFAULT_MOUNTSTATS_PATH == "/proc/self/mountstats"

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("MOUNT_PROC", "/host/proc/1/mountstats")
        assert get_mountstats_path() == "/host/proc/1/mountstats"

    def test_empty_env_uses_default(self, monkeypatch):
        monkeypatch.setenv("MOUNT_PROC", "")
        assert get_mountstats_path() == DEFAULT_MOUNTSTATS_PATH

    def test_availability(self, mountstats_file, tmp_path):
        assert is_mountstats_available(str(mountstats_file))
        assert not is_mountstats_available(str(tmp_path / "missing"))
        assert not is_mountstats_available(str(tmp_path))


class TestMetricRecord:
    """Test flattening records into metric points"""

    def test_to_points(self):
        record = MetricRecord("nfsstat_read", {"mountpoint": "/home", "serverexport": "srv:/home"},
                              {"read_ops": 10, "read_bytes": 300})
        points = record.to_points(timestamp=1700000000)

        assert [(p.name, p.value) for p in points] == [
            ("nfsstat_read_read_ops", 10),
            ("nfsstat_read_read_bytes", 300),
        ]
        assert all(p.timestamp == 1700000000 for p in points)
        assert points[0].labels == {"mountpoint": "/home", "serverexport": "srv:/home"}
        assert points[0].labels is not record.tags


class TestNFSClientExporter:
    """Test exporter configuration and collection"""

    def test_config_path_wins_over_env(self, monkeypatch, mountstats_file):
        monkeypatch.setenv("MOUNT_PROC", "/somewhere/else")
        exporter = NFSClientExporter(config={"mountstats_path": str(mountstats_file)})
        assert exporter.path == str(mountstats_file)
        assert exporter.available

    def test_env_path_used(self, monkeypatch, mountstats_file):
        monkeypatch.setenv("MOUNT_PROC", str(mountstats_file))
        exporter = NFSClientExporter()
        assert exporter.path == str(mountstats_file)
        assert exporter.available

    def test_missing_configured_file_stays_available(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            exporter = NFSClientExporter(config={"mountstats_path": str(tmp_path / "missing")})
        assert exporter.available
        assert "is not readable yet" in caplog.text

    def test_default_path_needs_linux(self, monkeypatch):
        monkeypatch.delenv("MOUNT_PROC", raising=False)
        with patch("nfsmon.exporters.metrics.nfsclient.sys.platform", "darwin"):
            assert not NFSClientExporter().available
        with patch("nfsmon.exporters.metrics.nfsclient.sys.platform", "linux"):
            assert NFSClientExporter().available

    def test_collect_default(self, mountstats_file):
        exporter = NFSClientExporter(config={"mountstats_path": str(mountstats_file)})
        metrics = asyncio.run(exporter.collect())

        # 5 read/write records with 5 fields each
        assert len(metrics) == 25
        by_key = {(m.name, m.labels["mountpoint"]): m.value for m in metrics}
        assert by_key[("nfsstat_read_read_ops", "/home")] == 1500
        assert by_key[("nfsstat_write_write_bytes", "/home")] == 43840
        assert by_key[("nfsstat_read_read_rtt", "/mnt/scratch")] == 15
        assert len({m.timestamp for m in metrics}) == 1

    def test_collect_fullstat_with_filters(self, mountstats_file):
        exporter = NFSClientExporter(config={
            "mountstats_path": str(mountstats_file),
            "fullstat": True,
            "include_mounts": ["^/mnt"],
            "exclude_mounts": ["scratch"],
        })
        metrics = asyncio.run(exporter.collect())

        assert {m.labels["mountpoint"] for m in metrics} == {"/mnt/archive"}
        names = {m.name for m in metrics}
        assert "nfs_events_pnfswrites" in names
        assert "nfs_xprt_udp_rpcsends" in names
        assert "nfs_ops_READ_total_time" in names

    def test_gather_calls_sink(self, mountstats_file):
        exporter = NFSClientExporter(config={"mountstats_path": str(mountstats_file)})
        seen = []
        assert exporter.gather(seen.append) == 5
        assert seen[0].measurement == "nfsstat_read"

    def test_collect_missing_file_logs_once(self, tmp_path, caplog):
        exporter = NFSClientExporter(config={"mountstats_path": str(tmp_path / "missing")})
        with caplog.at_level(logging.ERROR):
            metrics = asyncio.run(exporter.collect())

        assert metrics == []
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "Mountstats read error" in errors[0].getMessage()

    def test_read_failure_keeps_records_already_gathered(self, mountstats_file, mountstats_lines, caplog):
        exporter = NFSClientExporter(config={"mountstats_path": str(mountstats_file)})
        # Fails right after the /home block
        partial = mountstats_lines[:mountstats_lines.index("")]

        with patch("nfsmon.exporters.metrics.mountstats.open", create=True, return_value=FailingFile(partial)):
            with caplog.at_level(logging.ERROR):
                metrics = asyncio.run(exporter.collect())

        assert {m.labels["mountpoint"] for m in metrics} == {"/home"}
        assert len(metrics) == 10
        assert "Input/output error" in caplog.text

    def test_safe_collect(self, mountstats_file):
        exporter = NFSClientExporter(config={"mountstats_path": str(mountstats_file)})
        assert len(asyncio.run(exporter.safe_collect())) == 25
        assert exporter.last_collection > 0

    def test_safe_collect_disabled(self, mountstats_file):
        exporter = NFSClientExporter(config={"mountstats_path": str(mountstats_file)})
        exporter.enabled = False
        assert asyncio.run(exporter.safe_collect()) == []


class TestMetricsCollectorManager:
    """Test config-driven exporter setup and batch format"""

    def test_collect_metrics_schema(self, mountstats_file):
        manager = MetricsCollectorManager(config={"nfsclient": {"mountstats_path": str(mountstats_file)}})
        assert len(manager.exporters) == 1

        batch = asyncio.run(manager.collect_metrics())
        assert len(batch) == 25
        first = batch[0]
        assert set(first) == {"timestamp", "metric_name", "labels", "value_type", "value"}
        assert first["metric_name"] == "nfsstat_read_read_ops"
        assert first["value_type"] == "int"
        assert first["value"] == 1500
        assert first["labels"] == {"mountpoint": "/home", "serverexport": "nfs-server:/export/home"}

    def test_disabled_exporter(self, mountstats_file):
        manager = MetricsCollectorManager(config={
            "exporters": {"nfsclient": False},
            "nfsclient": {"mountstats_path": str(mountstats_file)},
        })
        assert manager.exporters == []
        assert asyncio.run(manager.collect_metrics()) == []

    def test_unavailable_exporter_skipped(self, monkeypatch):
        monkeypatch.delenv("MOUNT_PROC", raising=False)
        with patch("nfsmon.exporters.metrics.nfsclient.sys.platform", "darwin"):
            manager = MetricsCollectorManager(config={})
        assert manager.exporters == []

    def test_file_appearing_after_startup_is_collected(self, tmp_path, mountstats_file, caplog):
        path = tmp_path / "later" / "mountstats"
        manager = MetricsCollectorManager(config={"nfsclient": {"mountstats_path": str(path)}})
        assert len(manager.exporters) == 1

        with caplog.at_level(logging.ERROR):
            assert asyncio.run(manager.collect_metrics()) == []
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "Mountstats read error" in errors[0].getMessage()

        path.parent.mkdir()
        path.write_text(mountstats_file.read_text())
        batch = asyncio.run(manager.collect_metrics())
        assert len(batch) == 25
        assert batch[0]["metric_name"] == "nfsstat_read_read_ops"

    def test_exporter_init_failure_is_logged(self, caplog):
        with patch.dict(MetricsCollectorManager.EXPORTER_REGISTRY, {"nfsclient": _Broken}):
            with caplog.at_level(logging.WARNING):
                manager = MetricsCollectorManager(config={})
        assert manager.exporters == []
        assert "Failed to initialize exporter nfsclient" in caplog.text


class _Broken:
    def __init__(self, config=None):
        raise RuntimeError("boom")
