"""Tests for concurrent batch conversion and worker selection."""

from unittest.mock import patch

from conftest import FakeToolRunner, SizedRenderer

from sticker_bridge.converters import StickerConverter, convert_files, discover_inputs
from sticker_bridge.core.base import Direction, ProcessingStatus
from sticker_bridge.core.workers import MAX_WORKERS_CAP, get_safe_worker_count


def test_discover_inputs_filters_by_direction(tmp_path) -> None:
    for name in ["a.webp", "b.WEBP", "c.tgs", "d.webm", "notes.txt"]:
        (tmp_path / name).write_bytes(b"x")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "e.webp").write_bytes(b"x")

    assert [p.name for p in discover_inputs(tmp_path, Direction.WEBP_TO_GIF)] == ["a.webp", "b.WEBP"]
    assert [p.name for p in discover_inputs(tmp_path, Direction.TGS_TO_WEBP)] == ["c.tgs"]
    assert len(discover_inputs(tmp_path, Direction.WEBP_TO_GIF, recursive=True)) == 3


def test_convert_files_writes_outputs_and_reports_failures(tmp_path, config, scratch_root) -> None:
    class PickyRunner(FakeToolRunner):
        def run(self, tool, args, work_dir):  # noqa: ANN001, ANN202
            if (work_dir / "input.webp").read_bytes() == b"corrupt":
                return FakeToolRunner(fail={tool}).run(tool, args, work_dir)
            return super().run(tool, args, work_dir)

    source_dir = tmp_path / "in"
    source_dir.mkdir()
    for i in range(5):
        (source_dir / f"s{i}.webp").write_bytes(f"sticker {i}".encode())
    (source_dir / "bad.webp").write_bytes(b"corrupt")

    converter = StickerConverter(config, runner=PickyRunner(), renderer=SizedRenderer([1]))
    files = discover_inputs(source_dir, Direction.WEBP_TO_GIF)
    output_dir = tmp_path / "out"

    results = convert_files(converter, files, Direction.WEBP_TO_GIF, output_dir, max_workers=3)

    by_name = {r.source_file.name: r for r in results}
    assert len(results) == 6
    assert by_name["bad.webp"].status == ProcessingStatus.FAILED
    assert "imagemagick failed" in by_name["bad.webp"].message
    for i in range(5):
        result = by_name[f"s{i}.webp"]
        assert result.status == ProcessingStatus.SUCCESS
        assert result.output_file == output_dir / f"s{i}.gif"
        assert result.output_file.read_bytes() == f"sticker {i}".encode()
        assert result.metadata["format"] == "gif"

    job_ids = {r.metadata["job_id"] for r in results if r.status == ProcessingStatus.SUCCESS}
    assert len(job_ids) == 5
    assert not any(scratch_root.iterdir())


def test_convert_files_with_nothing_to_do(tmp_path, config) -> None:
    converter = StickerConverter(config, runner=FakeToolRunner(), renderer=SizedRenderer([1]))
    assert convert_files(converter, [], Direction.WEBP_TO_GIF, tmp_path / "out") == []
    assert not (tmp_path / "out").exists()


def test_configured_workers_capped_by_job_count() -> None:
    assert get_safe_worker_count(8, job_count=3) == 3
    assert get_safe_worker_count(2, job_count=10) == 2
    assert get_safe_worker_count(2, job_count=0) == 1


def test_auto_workers_from_cpu_count() -> None:
    with (
        patch("sticker_bridge.core.workers.psutil.cpu_count", return_value=16),
        patch("sticker_bridge.core.workers.psutil.cpu_percent", return_value=10.0),
    ):
        assert get_safe_worker_count(None) == MAX_WORKERS_CAP


def test_auto_workers_back_off_under_load() -> None:
    with (
        patch("sticker_bridge.core.workers.psutil.cpu_count", return_value=4),
        patch("sticker_bridge.core.workers.psutil.cpu_percent", return_value=95.0),
    ):
        assert get_safe_worker_count(None) == 1


def test_auto_workers_fallback_when_psutil_fails() -> None:
    with patch("sticker_bridge.core.workers.psutil.cpu_count", side_effect=OSError("no /proc")):
        assert get_safe_worker_count(None) == 1


def test_recursive_batch_keeps_subdirectories_apart(tmp_path, config) -> None:
    source_dir = tmp_path / "in"
    for sub, payload in [("a", b"AAA"), ("b", b"BBB")]:
        (source_dir / sub).mkdir(parents=True)
        (source_dir / sub / "x.webp").write_bytes(payload)
    (source_dir / "x.webp").write_bytes(b"TOP")

    converter = StickerConverter(config, runner=FakeToolRunner(), renderer=SizedRenderer([1]))
    files = discover_inputs(source_dir, Direction.WEBP_TO_GIF, recursive=True)
    output_dir = tmp_path / "out"

    results = convert_files(converter, files, Direction.WEBP_TO_GIF, output_dir, source_root=source_dir)

    assert all(r.status == ProcessingStatus.SUCCESS for r in results)
    assert (output_dir / "a" / "x.gif").read_bytes() == b"AAA"
    assert (output_dir / "b" / "x.gif").read_bytes() == b"BBB"
    assert (output_dir / "x.gif").read_bytes() == b"TOP"
    assert len({r.output_file for r in results}) == 3


def test_colliding_output_names_are_reported_not_overwritten(tmp_path, config) -> None:
    first = tmp_path / "in" / "a" / "x.webp"
    second = tmp_path / "in" / "b" / "x.webp"
    for path, payload in [(first, b"AAA"), (second, b"BBB")]:
        path.parent.mkdir(parents=True)
        path.write_bytes(payload)

    converter = StickerConverter(config, runner=FakeToolRunner(), renderer=SizedRenderer([1]))
    results = convert_files(converter, [first, second], Direction.WEBP_TO_GIF, tmp_path / "out")

    by_source = {r.source_file: r for r in results}
    assert by_source[first].status == ProcessingStatus.SUCCESS
    assert by_source[second].status == ProcessingStatus.FAILED
    assert "collides" in by_source[second].message
    assert [p.name for p in (tmp_path / "out").iterdir()] == ["x.gif"]
    assert (tmp_path / "out" / "x.gif").read_bytes() == b"AAA"
