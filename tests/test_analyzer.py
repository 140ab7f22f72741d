"""Tests for the file analyzer orchestration."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

import pytest

import sigrepair.analysis.analyzer as analyzer_module
from sigrepair.analysis import FileAnalyzer, FileProbe, is_signature_match, needs_extension_recovery
from sigrepair.catalog import CatalogError, FileType, SignatureCatalog, SignatureRecord
from sigrepair.config import SigrepairConfig, resolve_with_precedence

PNG_HEADER = bytes.fromhex("89504E470D0A1A0A0000000D49484452")

PNG = SignatureRecord(
    extension="png",
    mime_type="image/png",
    hex_signature="89504E470D0A1A0A",
    description="PNG image",
    file_type=FileType.IMAGE,
)
ZIP = SignatureRecord(
    extension="zip",
    mime_type="application/zip",
    hex_signature="504B0304",
    description="ZIP archive",
    file_type=FileType.ARCHIVE,
)
EXE = SignatureRecord(
    extension="exe",
    mime_type="application/x-msdownload",
    hex_signature="4D5A",
    description="Executable",
    file_type=FileType.EXECUTABLE,
)
TXT = SignatureRecord(
    extension="txt",
    mime_type="text/plain",
    hex_signature="",
    description="Plain text",
    file_type=FileType.TEXT,
)


class _MemoryStore:
    """Signature store serving a fixed list of records."""

    source = "memory"

    def __init__(self, records: Iterable[SignatureRecord]) -> None:
        self.records = list(records)

    def load(self) -> List[SignatureRecord]:
        return list(self.records)


class _BrokenStore:
    source = "broken"

    def load(self) -> List[SignatureRecord]:
        raise CatalogError("store unavailable")


def _analyzer(*records: SignatureRecord, **kwargs) -> FileAnalyzer:
    return FileAnalyzer(SignatureCatalog(_MemoryStore(records)), **kwargs)


def test_analyze_matches_signature(tmp_path: Path) -> None:
    target = tmp_path / "image.bin"
    target.write_bytes(PNG_HEADER)

    assert _analyzer(PNG, ZIP, TXT).analyze(target) == PNG


def test_analyze_rejects_invalid_paths(tmp_path: Path) -> None:
    analyzer = _analyzer(PNG, TXT)
    empty = tmp_path / "empty.png"
    empty.write_bytes(b"")

    assert analyzer.analyze(None) is None
    assert analyzer.analyze(tmp_path / "missing.png") is None
    assert analyzer.analyze(tmp_path) is None
    assert analyzer.analyze(empty) is None


def test_catalog_order_breaks_ties(tmp_path: Path) -> None:
    target = tmp_path / "ambiguous.bin"
    target.write_bytes(b"PK\x03\x04MZ")

    assert _analyzer(EXE, ZIP).analyze(target) == EXE
    assert _analyzer(ZIP, EXE).analyze(target) == ZIP


def test_text_fallback_uses_catalog_text_record(tmp_path: Path) -> None:
    target = tmp_path / "notes"
    target.write_text("hello world\nsecond line\n", encoding="utf-8")

    assert _analyzer(PNG, ZIP, TXT).analyze(target) == TXT


def test_text_fallback_requires_text_record(tmp_path: Path) -> None:
    target = tmp_path / "notes"
    target.write_text("hello world\n", encoding="utf-8")

    assert _analyzer(PNG, ZIP).analyze(target) is None


def test_text_fallback_can_be_disabled(tmp_path: Path) -> None:
    target = tmp_path / "notes"
    target.write_text("hello world\n", encoding="utf-8")

    assert _analyzer(PNG, TXT, text_fallback_extension=None).analyze(target) is None


def test_unmatched_binary_is_undetermined(tmp_path: Path) -> None:
    target = tmp_path / "blob"
    target.write_bytes(b"\x00\x01\x02\x03\x04")

    assert _analyzer(PNG, ZIP, TXT).analyze(target) is None


def test_signature_beyond_probe_window_is_not_seen(tmp_path: Path) -> None:
    target = tmp_path / "late.bin"
    target.write_bytes(b"\x00" * 40 + PNG_HEADER)

    assert _analyzer(PNG, TXT).analyze(target) is None
    assert _analyzer(PNG, TXT, match_bytes=64).analyze(target) == PNG


def test_analyze_is_idempotent(tmp_path: Path) -> None:
    target = tmp_path / "archive"
    target.write_bytes(b"PK\x03\x04\x14\x00\x00\x00")
    analyzer = _analyzer(PNG, ZIP, TXT)

    first = analyzer.analyze(target)
    second = analyzer.analyze(target)

    assert first == second == ZIP
    assert first.model_dump() == second.model_dump()


def test_each_analysis_rereads_the_file_header(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    target = tmp_path / "image.bin"
    target.write_bytes(PNG_HEADER + b"\x00" * 40)
    probes: list[FileProbe] = []
    original = analyzer_module.probe_file

    def _recording_probe(path: Path, size: int) -> FileProbe:
        probe = original(path, size)
        probes.append(probe)
        return probe

    monkeypatch.setattr(analyzer_module, "probe_file", _recording_probe)
    analyzer = _analyzer(PNG, TXT)

    analyzer.analyze(target)
    result = analyzer.inspect(target)

    assert len(probes) == 3
    assert probes[0] is not probes[2]
    assert len(probes[0].hex_prefix) == 64
    assert probes[1].hex_prefix == result.hex_prefix_observed
    assert len(result.hex_prefix_observed) == 32
    assert probes[1].extension == result.current_extension == "bin"


def test_catalog_failure_yields_undetermined(tmp_path: Path) -> None:
    target = tmp_path / "image.png"
    target.write_bytes(PNG_HEADER)

    assert FileAnalyzer(SignatureCatalog(_BrokenStore())).analyze(target) is None


def test_every_builtin_signature_is_recognized(tmp_path: Path) -> None:
    catalog = SignatureCatalog()
    analyzer = FileAnalyzer(catalog)
    records = catalog.list_all()

    for position, record in enumerate(records):
        if not record.hex_signature:
            continue
        target = tmp_path / f"sample-{position}"
        target.write_bytes(bytes.fromhex(record.hex_signature))
        fingerprint = record.hex_signature.upper()
        expected = next(
            candidate
            for candidate in records
            if candidate.hex_signature and is_signature_match(fingerprint, candidate.hex_signature)
        )

        assert analyzer.analyze(target) == expected


@pytest.mark.parametrize(
    ("header", "extension"),
    [
        (PNG_HEADER, "png"),
        (b"\xff\xd8\xff\xe0\x00\x10JFIF\x00", "jpg"),
        (b"%PDF-1.7\n%\xe2\xe3\xcf\xd3\n", "pdf"),
        (b"PK\x03\x04\x14\x00\x06\x00", "zip"),
        (b"\x1f\x8b\x08\x00\x00\x00\x00\x00", "gz"),
        (b"\x7fELF\x02\x01\x01\x00", "elf"),
        (b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00", "mp4"),
        (b"SQLite format 3\x00\x10\x00", "sqlite"),
    ],
)
def test_builtin_catalog_identifies_common_formats(
    tmp_path: Path, header: bytes, extension: str
) -> None:
    target = tmp_path / "unknown.dat"
    target.write_bytes(header)

    record = FileAnalyzer(SignatureCatalog()).analyze(target)

    assert record is not None
    assert record.extension == extension


def test_inspect_flags_wrong_extension(tmp_path: Path) -> None:
    target = tmp_path / "photo.txt"
    target.write_bytes(PNG_HEADER + b"\x00" * 24)

    result = _analyzer(PNG, TXT).inspect(target)

    assert result.matched_record == PNG
    assert result.current_extension == "txt"
    assert result.needs_extension_recovery is True
    assert result.hex_prefix_observed == PNG_HEADER.hex().upper()


def test_inspect_accepts_matching_extension(tmp_path: Path) -> None:
    target = tmp_path / "photo.PNG"
    target.write_bytes(PNG_HEADER)

    result = _analyzer(PNG, TXT).inspect(target)

    assert result.determined
    assert result.needs_extension_recovery is False


def test_inspect_missing_extension_needs_recovery(tmp_path: Path) -> None:
    target = tmp_path / "photo"
    target.write_bytes(PNG_HEADER)

    assert _analyzer(PNG).inspect(target).needs_extension_recovery is True


def test_inspect_undetermined_never_needs_recovery(tmp_path: Path) -> None:
    target = tmp_path / "blob.dat"
    target.write_bytes(b"\x00\x01")

    result = _analyzer(PNG).inspect(target)

    assert not result.determined
    assert result.needs_extension_recovery is False
    assert result.hex_prefix_observed == "0001"


def test_needs_extension_recovery_uses_substring_containment() -> None:
    assert needs_extension_recovery("jpg", "") is True
    assert needs_extension_recovery("jpg", "JPG") is False
    assert needs_extension_recovery("tiff", "tif") is False
    assert needs_extension_recovery("jpg", "jpeg") is True
    assert needs_extension_recovery("jpeg", "jpg") is True


def test_recover_renames_file(tmp_path: Path) -> None:
    target = tmp_path / "photo.txt"
    target.write_bytes(PNG_HEADER)

    assert _analyzer(PNG).recover(target, "png") is True
    assert not target.exists()
    assert (tmp_path / "photo.png").exists()


@pytest.mark.parametrize("extension", [None, "", "   "])
def test_recover_rejects_empty_extension(tmp_path: Path, extension: str | None) -> None:
    target = tmp_path / "photo.txt"
    target.write_bytes(PNG_HEADER)

    assert _analyzer(PNG).recover(target, extension) is False
    assert [path.name for path in tmp_path.iterdir()] == ["photo.txt"]


def test_recover_rejects_missing_file(tmp_path: Path) -> None:
    analyzer = _analyzer(PNG)

    assert analyzer.recover(tmp_path / "missing.txt", "png") is False
    assert analyzer.recover(None, "png") is False
    assert list(tmp_path.iterdir()) == []


def test_recover_fails_when_target_exists(tmp_path: Path) -> None:
    target = tmp_path / "photo.txt"
    target.write_bytes(PNG_HEADER)
    (tmp_path / "photo.png").write_bytes(b"other")

    assert _analyzer(PNG).recover(target, "png") is False
    assert target.exists()


def test_from_config_applies_settings() -> None:
    config = resolve_with_precedence(
        defaults=SigrepairConfig(),
        cli_overrides={
            "probe.match_bytes": 8,
            "probe.display_bytes": 4,
            "text.enabled": False,
            "text.ascii_only": False,
            "recovery.max_extension_length": 4,
        },
    )

    analyzer = FileAnalyzer.from_config(config, SignatureCatalog(_MemoryStore([PNG])))

    assert analyzer.match_bytes == 8
    assert analyzer.display_bytes == 4
    assert analyzer.text_fallback_extension is None
    assert analyzer.text_classifier.ascii_only is False
    assert analyzer.max_extension_length == 4
