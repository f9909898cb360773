"""Tests for writing asset files and fetching them back."""

import os
import sys

import pytest

from assetgraph.asset.base import AssetFile
from assetgraph.asset.persist import DiskFileFetcher, write_file, write_files


class TestAssetFile:
    """Tests for AssetFile validation."""

    def test_relative_name(self):
        """Test nested relative names are accepted."""
        file = AssetFile("auth/kubeconfig", b"data")
        assert file.filename == "auth/kubeconfig"

    @pytest.mark.parametrize("name", ["", "/etc/passwd", "../escape", "a/../../b"])
    def test_invalid_names(self, name):
        """Test empty, absolute and parent-escaping names are rejected."""
        with pytest.raises(ValueError, match="invalid asset filename"):
            AssetFile(name, b"")


class TestWriteFiles:
    """Tests for write_files."""

    def test_round_trip(self, tmp_path):
        """Test files read back through the fetcher are byte-identical."""
        files = [
            AssetFile("metadata.json", b'{"clusterName": "demo"}'),
            AssetFile("auth/kubeconfig", b"apiVersion: v1\n"),
            AssetFile("terraform.tfstate", bytes(range(256))),
        ]

        write_files(tmp_path, files)
        fetcher = DiskFileFetcher(tmp_path)

        for file in files:
            assert fetcher.fetch_by_name(file.filename) == file

    def test_creates_parent_directories(self, tmp_path):
        """Test nested directories are created as needed."""
        paths = write_files(tmp_path / "install", [AssetFile("a/b/c.txt", b"c")])

        assert paths == [tmp_path / "install" / "a" / "b" / "c.txt"]
        assert paths[0].read_bytes() == b"c"

    def test_overwrites_existing(self, tmp_path):
        """Test rewriting a file replaces its contents."""
        write_file(tmp_path, AssetFile("a.txt", b"old"))
        write_file(tmp_path, AssetFile("a.txt", b"new"))

        assert (tmp_path / "a.txt").read_bytes() == b"new"

    def test_no_temp_files_left(self, tmp_path):
        """Test the atomic write leaves only the target file."""
        write_files(tmp_path, [AssetFile("a.txt", b"a"), AssetFile("b.txt", b"b")])

        assert sorted(p.name for p in tmp_path.iterdir()) == ["a.txt", "b.txt"]

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_permissions(self, tmp_path):
        """Test files and created directories have fixed modes."""
        write_files(tmp_path, [AssetFile("auth/kubeconfig", b"secret")])

        assert os.stat(tmp_path / "auth" / "kubeconfig").st_mode & 0o777 == 0o640
        assert not os.stat(tmp_path / "auth").st_mode & 0o002


class TestDiskFileFetcher:
    """Tests for DiskFileFetcher."""

    def test_missing_file(self, tmp_path):
        """Test absent files are reported as None."""
        assert DiskFileFetcher(tmp_path).fetch_by_name("terraform.tfstate") is None

    def test_missing_directory(self, tmp_path):
        """Test a nonexistent asset directory behaves as empty."""
        fetcher = DiskFileFetcher(tmp_path / "nope")

        assert fetcher.fetch_by_name("a.txt") is None
        assert fetcher.fetch_by_pattern("*") == []

    def test_directory_is_not_a_file(self, tmp_path):
        """Test a directory with the requested name is not returned."""
        (tmp_path / "auth").mkdir()
        assert DiskFileFetcher(tmp_path).fetch_by_name("auth") is None

    def test_content_is_not_interpreted(self, tmp_path):
        """Test arbitrary bytes are returned verbatim."""
        (tmp_path / "terraform.tfstate").write_bytes(b"\x00not json\xff")

        file = DiskFileFetcher(tmp_path).fetch_by_name("terraform.tfstate")

        assert file.data == b"\x00not json\xff"

    def test_fetch_by_pattern(self, tmp_path):
        """Test glob matches are returned sorted with relative names."""
        write_files(
            tmp_path,
            [
                AssetFile("manifests/b.yaml", b"b"),
                AssetFile("manifests/a.yaml", b"a"),
                AssetFile("metadata.json", b"{}"),
            ],
        )

        files = DiskFileFetcher(tmp_path).fetch_by_pattern("manifests/*.yaml")

        assert [f.filename for f in files] == ["manifests/a.yaml", "manifests/b.yaml"]
        assert [f.data for f in files] == [b"a", b"b"]

    def test_fetch_by_pattern_skips_partial_writes(self, tmp_path):
        """Test temp files from an interrupted write are ignored."""
        (tmp_path / "a.txt").write_bytes(b"a")
        (tmp_path / ".a.txt.x1y2.tmp").write_bytes(b"partial")

        files = DiskFileFetcher(tmp_path).fetch_by_pattern("*")

        assert [f.filename for f in files] == ["a.txt"]
