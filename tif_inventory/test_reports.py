"""
Tests for the file_scanner and report_builder modules.
"""
import asyncio
import shutil
import sys
import tempfile
from datetime import timezone
from pathlib import Path

import pandas as pd
import pytest
from PIL import Image

# Add parent directory to path for imports when running directly
sys.path.insert(0, str(Path(__file__).parent.parent))

from tif_inventory.file_scanner import ScanResult, EnumerationError, scan_for_images
from tif_inventory.report_builder import (
    build_report, build_stats_report, build_tags_report, collect_records, records_to_csv
)
from tif_inventory.stats_extractor import STATS_COLUMNS
from tif_inventory.tag_extractor import TAG_COLUMNS, MetadataMissingError


def create_test_directory():
    """Create a directory tree with TIFF scans and some unrelated files."""
    temp_dir = Path(tempfile.mkdtemp())

    tiffs = [
        "Album 1/Grandma.tif",
        "Album 1/Grandma (1).tif",
        "Album 2/Beach.tif",
        "Album 2/Nested/Beach (2).tif",
        "Cover.tif",
    ]
    for index, rel_path in enumerate(tiffs):
        path = temp_dir / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new('RGB', (4 + index, 3)).save(
            path, format='TIFF', tiffinfo={271: 'Epson', 306: f'2020:01:0{index + 1} 12:00:00'}
        )

    (temp_dir / "Album 1" / "notes.txt").write_text("not an image")
    (temp_dir / "Album 2" / "Beach.jpg").write_bytes(b"not matched")
    (temp_dir / "Folder.tif").mkdir()  # a directory, not a file

    return temp_dir, [temp_dir / p for p in tiffs]


def read_report(path: Path) -> pd.DataFrame:
    return pd.read_csv(path, dtype=str, keep_default_na=False)


def test_scan_for_images():
    """Only .tif files are matched, recursively, sorted by path."""
    print("=" * 60)
    print("SCAN TEST")
    print("=" * 60)

    temp_dir, tiffs = create_test_directory()
    try:
        result = scan_for_images(temp_dir)
        print(f"  Matched: {[str(p.relative_to(temp_dir)) for p in result.paths]}")

        assert result.ok
        assert result.unwrap() == sorted(tiffs)

        empty = scan_for_images(temp_dir, "**/*.png")
        assert empty.ok and empty.unwrap() == []

        print("[PASS] Scan test passed")
    finally:
        shutil.rmtree(temp_dir)


def test_scan_errors():
    """A missing origin is an error result, raised on unwrap."""
    result = scan_for_images("/nonexistent/origin")
    assert not result.ok
    assert "not found" in result.error
    with pytest.raises(EnumerationError):
        result.unwrap()

    with pytest.raises(EnumerationError, match="boom"):
        ScanResult.Err("boom").unwrap()
    print("[PASS] Scan errors surface on unwrap")


def test_order_preserved_despite_completion_order():
    """Rows follow input order even when extractions finish out of order."""
    print("\n" + "=" * 60)
    print("ORDER PRESERVATION TEST")
    print("=" * 60)

    delays = {'A': 0.03, 'B': 0.06, 'C': 0.0}
    completed = []

    async def extractor(path):
        await asyncio.sleep(delays[path])
        completed.append(path)
        return {'File Path': path}

    temp_dir = Path(tempfile.mkdtemp())
    try:
        destination = temp_dir / "out.csv"
        records = asyncio.run(build_report(['A', 'B', 'C'], extractor, destination, ['File Path']))

        print(f"  Completion order: {completed}")
        assert completed == ['C', 'A', 'B']
        assert [r['File Path'] for r in records] == ['A', 'B', 'C']
        assert read_report(destination)['File Path'].tolist() == ['A', 'B', 'C']

        print("[PASS] Order preservation test passed")
    finally:
        shutil.rmtree(temp_dir)


def test_extractions_run_concurrently():
    """All extractions are in flight before any finishes."""
    in_flight = 0
    peak = 0

    async def extractor(path):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return {'File Path': path}

    asyncio.run(collect_records([str(i) for i in range(10)], extractor))
    assert peak == 10


def test_all_or_nothing():
    """If the third of five extractions fails, nothing is written."""
    print("\n" + "=" * 60)
    print("ALL-OR-NOTHING TEST")
    print("=" * 60)

    temp_dir, tiffs = create_test_directory()
    try:
        batch = list(tiffs)
        batch[2] = temp_dir / "vanished.tif"
        destination = temp_dir / "reports" / "stats.csv"

        with pytest.raises(FileNotFoundError):
            asyncio.run(build_stats_report(batch, destination))
        assert not destination.exists()

        # An existing report is left untouched too
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text("previous run\n")
        broken = temp_dir / "broken.tif"
        broken.write_bytes(b"garbage")
        batch[2] = broken
        with pytest.raises(MetadataMissingError):
            asyncio.run(build_tags_report(batch, destination))
        assert destination.read_text() == "previous run\n"

        print("[PASS] All-or-nothing test passed")
    finally:
        shutil.rmtree(temp_dir)


def test_failure_cancels_pending_extractions():
    """Extractions still running when one fails are cancelled, not left behind."""
    finished = []
    cancelled = []

    async def extractor(path):
        if path == 'bad':
            raise OSError("unreadable")
        try:
            await asyncio.sleep(0.05)
        except asyncio.CancelledError:
            cancelled.append(path)
            raise
        finished.append(path)
        return {'File Path': path}

    async def run_and_wait():
        with pytest.raises(OSError, match="unreadable"):
            await collect_records(['slow1', 'bad', 'slow2'], extractor)
        # Give any leftover extraction time to complete
        await asyncio.sleep(0.1)

    asyncio.run(run_and_wait())
    assert finished == []
    assert sorted(cancelled) == ['slow1', 'slow2']
    print("[PASS] Pending extractions cancelled on failure")


def test_stats_report_file():
    """The stats CSV has the fixed header and one row per file, in order."""
    temp_dir, tiffs = create_test_directory()
    try:
        destination = temp_dir / "reports" / "stats.csv"
        destination.parent.mkdir()
        destination.write_text("stale content\n")

        asyncio.run(build_stats_report(tiffs, destination))

        df = read_report(destination)
        assert list(df.columns) == STATS_COLUMNS
        assert df['File Path'].tolist() == [str(p) for p in tiffs]
        assert df['Size'].tolist() == [str(p.stat().st_size) for p in tiffs]
        print("[PASS] Stats report file test passed")
    finally:
        shutil.rmtree(temp_dir)


def test_tags_report_file():
    """The tags CSV carries normalized values and the reparsed dates."""
    temp_dir, tiffs = create_test_directory()
    try:
        destination = temp_dir / "tags.csv"
        asyncio.run(build_tags_report(tiffs, destination, timezone.utc))

        df = read_report(destination)
        assert list(df.columns) == TAG_COLUMNS
        assert df['File Path'].tolist() == [str(p) for p in tiffs]
        assert df['Make'].tolist() == ['Epson'] * len(tiffs)
        assert df['Image Width'].tolist() == [str(4 + i) for i in range(len(tiffs))]
        assert df['Date Time'].iloc[0] == '2020-01-01T12:00:00.000Z'
        assert df['Date Time (ms)'].iloc[0] == '1577880000000'
        assert df['Model'].tolist() == ['-'] * len(tiffs)
        print("[PASS] Tags report file test passed")
    finally:
        shutil.rmtree(temp_dir)


def test_empty_batch_writes_header():
    temp_dir = Path(tempfile.mkdtemp())
    try:
        destination = temp_dir / "stats.csv"
        records = asyncio.run(build_stats_report([], destination))
        assert records == []
        assert destination.read_text().strip() == ",".join(STATS_COLUMNS)
        assert records_to_csv([], ['a', 'b']).strip() == "a,b"
    finally:
        shutil.rmtree(temp_dir)


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
