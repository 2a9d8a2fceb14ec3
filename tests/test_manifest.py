import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from dynpkg.errors import ManifestMissingError
from dynpkg.manifest import ManifestBackup, ManifestPatcher

TOKEN = "com.github.metacubex.clash.meta"

MANIFEST = (
    '<?xml version="1.0" encoding="utf-8"?>\r\n'
    '<manifest xmlns:android="http://schemas.android.com/apk/res/android"\r\n'
    '    package="com.github.metacubex.clash.meta">\r\n'
    '    <permission android:name="com.github.metacubex.clash.meta.permission.RECEIVE_BROADCASTS" />\r\n'
    '    <intent-filter>\r\n'
    '        <action android:name="com.github.metacubex.clash.meta.action.START_CLASH" />\r\n'
    '        <action android:name="android.intent.action.MAIN" />\r\n'
    '    </intent-filter>\r\n'
    '</manifest>\r\n'
).encode("utf-8")


@pytest.fixture
def manifest(tmp_path):
    path = tmp_path / "AndroidManifest.xml"
    path.write_bytes(MANIFEST)
    return path


def test_backup_path_is_sibling(manifest):
    backup = ManifestBackup(manifest)
    assert backup.backup == manifest.with_name("AndroidManifest.xml.backup")


def test_ensure_backup_copies_bytes(manifest):
    backup = ManifestBackup(manifest)
    assert backup.ensure_backup() is True
    assert backup.backup.read_bytes() == MANIFEST


def test_ensure_backup_is_write_once(manifest):
    backup = ManifestBackup(manifest)
    backup.ensure_backup()
    manifest.write_bytes(b"<manifest/>")

    assert backup.ensure_backup() is False
    assert backup.backup.read_bytes() == MANIFEST


def test_ensure_backup_without_manifest(tmp_path):
    backup = ManifestBackup(tmp_path / "AndroidManifest.xml")
    with pytest.raises(ManifestMissingError):
        backup.ensure_backup()
    assert not backup.backup.exists()
    assert list(tmp_path.iterdir()) == []


def test_restore_without_backup_is_noop(tmp_path):
    backup = ManifestBackup(tmp_path / "AndroidManifest.xml")
    assert backup.restore() is False
    assert not backup.manifest.exists()


def test_restore_keeps_snapshot(manifest):
    backup = ManifestBackup(manifest)
    backup.ensure_backup()
    manifest.write_bytes(b"changed")

    assert backup.restore() is True
    assert manifest.read_bytes() == MANIFEST
    assert backup.backup.read_bytes() == MANIFEST


def test_patch_replaces_every_occurrence(manifest):
    result = ManifestPatcher(manifest).apply_identity("abc123")
    content = manifest.read_bytes().decode("utf-8")

    assert result.replacements == 3
    assert result.changed
    assert content.count(TOKEN) == 0
    assert content.count("abc123.action") == 3
    assert 'package="abc123.action"' in content
    assert "android.intent.action.MAIN" in content
    assert content.count("\r\n") == MANIFEST.count(b"\r\n")


def test_patch_uses_configured_token_and_suffix(tmp_path):
    path = tmp_path / "manifest.xml"
    path.write_text('<manifest package="org.example.app" />', encoding="utf-8")

    result = ManifestPatcher(path, base_token="org.example.app", suffix=".svc").apply_identity("zz99")

    assert result.replacements == 1
    assert path.read_text(encoding="utf-8") == '<manifest package="zz99.svc" />'


def test_patch_missing_manifest_writes_nothing(tmp_path):
    patcher = ManifestPatcher(tmp_path / "AndroidManifest.xml")
    with pytest.raises(ManifestMissingError):
        patcher.apply_identity("abc123")
    assert list(tmp_path.iterdir()) == []


def test_second_patch_without_restore_leaves_manifest_unchanged(manifest):
    patcher = ManifestPatcher(manifest)
    patcher.apply_identity("abc123")
    patched = manifest.read_bytes()

    result = patcher.apply_identity("xyz789")

    assert result.replacements == 0
    assert result.already_patched
    assert manifest.read_bytes() == patched


def test_manifest_without_token_is_not_reported_as_patched(tmp_path):
    path = tmp_path / "AndroidManifest.xml"
    path.write_text('<manifest package="org.example">\n<action android:name="android.intent.action.MAIN"/>\n</manifest>\n')

    result = ManifestPatcher(path).apply_identity("abc123")

    assert result.replacements == 0
    assert not result.already_patched


def test_backup_patch_restore_round_trip(manifest):
    backup = ManifestBackup(manifest)
    patcher = ManifestPatcher(manifest)

    backup.ensure_backup()
    patcher.apply_identity("abc123")
    assert manifest.read_bytes() != MANIFEST
    backup.restore()

    assert manifest.read_bytes() == MANIFEST
    assert patcher.count_token() == 3


def test_repeated_cycles_always_start_from_pristine(manifest):
    backup = ManifestBackup(manifest)
    patcher = ManifestPatcher(manifest)

    for identity in ("first1", "second2", "third3"):
        backup.restore()
        backup.ensure_backup()
        assert patcher.apply_identity(identity).replacements == 3

    backup.restore()
    assert manifest.read_bytes() == MANIFEST


def test_empty_token_rejected(manifest):
    with pytest.raises(ValueError):
        ManifestPatcher(manifest, base_token="")


def test_failed_backup_copy_leaves_no_backup_or_temp(manifest, monkeypatch):
    def refuse(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("dynpkg.manifest.backup.shutil.copyfile", refuse)
    backup = ManifestBackup(manifest)
    with pytest.raises(OSError):
        backup.ensure_backup()

    assert not backup.backup.exists()
    assert list(manifest.parent.glob("*.tmp")) == []
    assert manifest.read_bytes() == MANIFEST


def test_latin1_manifest_bytes_survive_patching(tmp_path):
    path = tmp_path / "AndroidManifest.xml"
    original = b'<manifest package="' + TOKEN.encode() + b'" android:label="Caf\xe9" />\n'
    path.write_bytes(original)

    patcher = ManifestPatcher(path)
    assert patcher.count_token() == 1
    result = patcher.apply_identity("abcd1234")

    patched = path.read_bytes()
    assert result.replacements == 1
    assert b'android:label="Caf\xe9"' in patched
    assert patched == original.replace(TOKEN.encode(), b"abcd1234.action")
