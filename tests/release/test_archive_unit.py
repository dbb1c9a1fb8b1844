"""Unit tests for staged sources archive extraction."""

import io
import tarfile

import pytest

from src.release.archive import ArchiveError, extract_archive


def _write_archive(path, members, mode="w:gz"):
    """Write a tar archive with the given {name: bytes} regular files."""
    with tarfile.open(path, mode) as archive:
        for name, data in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            archive.addfile(info, io.BytesIO(data))


class TestExtractArchive:

    def test_extracts_relative_to_destination(self, tmp_path):
        archive = tmp_path / "kubernetes-src.tar.gz"
        _write_archive(archive, {
            "src/k8s.io/kubernetes/README.md": b"# Kubernetes",
            "src/k8s.io/kubernetes/go.mod": b"module k8s.io/kubernetes",
        })
        destination = tmp_path / "work"

        extract_archive(archive, destination)

        workspace = destination / "src" / "k8s.io" / "kubernetes"
        assert (workspace / "README.md").read_bytes() == b"# Kubernetes"
        assert (workspace / "go.mod").is_file()

    @pytest.mark.parametrize("mode", ["w", "w:bz2", "w:xz"])
    def test_detects_compression(self, tmp_path, mode):
        archive = tmp_path / "sources.tar"
        _write_archive(archive, {"file.txt": b"data"}, mode=mode)
        extract_archive(archive, tmp_path / "out")
        assert (tmp_path / "out" / "file.txt").read_bytes() == b"data"

    def test_overwrites_existing_files(self, tmp_path):
        destination = tmp_path / "out"
        destination.mkdir()
        (destination / "file.txt").write_bytes(b"old")
        archive = tmp_path / "sources.tar.gz"
        _write_archive(archive, {"file.txt": b"new"})

        extract_archive(archive, destination)

        assert (destination / "file.txt").read_bytes() == b"new"

    def test_missing_archive_raises(self, tmp_path):
        with pytest.raises(ArchiveError, match="missing.tar.gz"):
            extract_archive(tmp_path / "missing.tar.gz", tmp_path / "out")

    def test_corrupt_archive_raises(self, tmp_path):
        archive = tmp_path / "corrupt.tar.gz"
        archive.write_bytes(b"definitely not a tarball")
        with pytest.raises(ArchiveError):
            extract_archive(archive, tmp_path / "out")

    def test_member_escaping_destination_is_rejected(self, tmp_path):
        archive = tmp_path / "evil.tar.gz"
        _write_archive(archive, {"../escaped.txt": b"x"})
        with pytest.raises(ArchiveError):
            extract_archive(archive, tmp_path / "out")
        assert not (tmp_path / "escaped.txt").exists()
