#!/usr/bin/env python3
"""Tests for the dynpkg package surface, helpers and configuration."""

from __future__ import annotations

import json
import shutil
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

import dynpkg
from dynpkg import BuildPipeline, PipelineConfig
from dynpkg.config import DEFAULT_ASSETS, EXAMPLE_CONFIG, get_default_config, load_config_from_file
from dynpkg.contracts.asset_spec import AssetSpec
from dynpkg.utils.jsonl import append_jsonl, read_jsonl
from dynpkg.utils.time_utils import format_duration, format_generated_time, to_iso_format


class TestDynPkgPackage(unittest.TestCase):
    def setUp(self):
        self.tempdir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.tempdir, ignore_errors=True)

    def test_public_exports(self):
        for name in dynpkg.__all__:
            self.assertTrue(hasattr(dynpkg, name), name)
        self.assertEqual(dynpkg.__version__, "1.0.0")
        self.assertTrue(issubclass(dynpkg.StoreCorruptError, dynpkg.DynPkgError))

    def test_generated_time_format(self):
        dt = datetime(2026, 10, 18, 9, 15, 2, tzinfo=timezone.utc)
        self.assertEqual(format_generated_time(dt), "Sun Oct 18 09:15:02 UTC 2026")
        self.assertTrue(to_iso_format(dt.replace(tzinfo=None)).endswith("+00:00"))

    def test_format_duration(self):
        start = datetime(2026, 1, 1, tzinfo=timezone.utc)
        self.assertEqual(format_duration(start, start + timedelta(minutes=5, seconds=3)), "5m 3s")
        self.assertEqual(format_duration(start, start + timedelta(hours=2)), "2h 0m 0s")
        self.assertEqual(format_duration(start, start + timedelta(seconds=9)), "9s")

    def test_jsonl_roundtrip_skips_malformed_lines(self):
        path = self.tempdir / "logs" / "events.jsonl"
        append_jsonl(str(path), {"event": "one"})
        with open(path, "a", encoding="utf-8") as f:
            f.write("{not json\n")
        append_jsonl(str(path), {"event": "two"})

        entries = read_jsonl(str(path))
        self.assertEqual([e["event"] for e in entries], ["one", "two"])
        self.assertIn("_iso_time", entries[0])
        self.assertEqual(read_jsonl(str(self.tempdir / "missing.jsonl")), [])

    def test_config_resolves_paths_against_workspace(self):
        config = PipelineConfig(workspace=self.tempdir, manifest_path="src/AndroidManifest.xml")
        self.assertEqual(config.manifest, self.tempdir / "src/AndroidManifest.xml")
        self.assertEqual(config.backup, self.tempdir / "src/AndroidManifest.xml.backup")
        self.assertEqual(config.properties, self.tempdir / "dynamic_package.properties")

        absolute = self.tempdir / "elsewhere.properties"
        config = PipelineConfig(workspace=self.tempdir, properties_file=absolute)
        self.assertEqual(config.properties, absolute)

    def test_default_assets_are_the_geo_files(self):
        names = [Path(spec.destination_path).name for spec in DEFAULT_ASSETS]
        self.assertEqual(names, ["geoip.metadb", "geosite.dat", "ASN.mmdb"])
        self.assertEqual(PipelineConfig().assets, DEFAULT_ASSETS)

    def test_load_config_from_file(self):
        path = self.tempdir / "dynpkg.json"
        path.write_text(json.dumps(EXAMPLE_CONFIG), encoding="utf-8")

        config = load_config_from_file(str(path), workspace=str(self.tempdir), manifest_path=None)

        self.assertEqual(config.workspace, self.tempdir)
        self.assertEqual(config.manifest_path, Path("app/src/main/AndroidManifest.xml"))
        self.assertEqual(len(config.assets), 1)
        self.assertIsInstance(config.assets[0], AssetSpec)

    def test_load_config_rejects_unknown_keys_and_missing_file(self):
        path = self.tempdir / "dynpkg.json"
        path.write_text(json.dumps({"workspace": ".", "colour": "blue"}), encoding="utf-8")
        with self.assertRaises(ValueError):
            load_config_from_file(str(path))
        with self.assertRaises(FileNotFoundError):
            load_config_from_file(str(self.tempdir / "absent.json"))

    def test_pipeline_wires_components_from_config(self):
        config = PipelineConfig(workspace=self.tempdir, identity_length=20, base_token="org.example")
        pipeline = BuildPipeline(config)
        self.assertEqual(pipeline.generator.length, 20)
        self.assertEqual(pipeline.patcher.base_token, "org.example")
        self.assertEqual(pipeline.store.path, config.properties)
        self.assertEqual(pipeline.backup.backup, config.backup)

    def test_jsonl_event_filter(self):
        path = self.tempdir / "events.jsonl"
        append_jsonl(str(path), {"event": "asset_downloaded", "path": "a"})
        append_jsonl(str(path), {"event": "manifest_patched"})
        with open(path, "a", encoding="utf-8") as f:
            f.write('["not", "an", "event"]\n')
        append_jsonl(str(path), {"event": "asset_downloaded", "path": "b"})

        entries = read_jsonl(str(path), event="asset_downloaded")
        self.assertEqual([e["path"] for e in entries], ["a", "b"])
        self.assertEqual(len(read_jsonl(str(path))), 3)

    def test_pipeline_defaults_to_default_config(self):
        pipeline = BuildPipeline()
        self.assertEqual(pipeline.config, get_default_config())
        self.assertEqual(pipeline.config.manifest_path, PipelineConfig().manifest_path)


if __name__ == "__main__":
    unittest.main()
