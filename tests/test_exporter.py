import io
import zipfile

import pytest
from PIL import Image

from photo_frame.errors import EncodeError, ExportCancelled
from photo_frame.exporter import ZipArchive, export_all, export_current, write_output
from photo_frame.image_io import encode_png
from photo_frame.models import FrameParameters, ImageCollection


class RecordingArchive:
    """Archive stand-in that remembers what happened to it."""

    instances = []

    def __init__(self):
        self.entries = []
        self.finalized = False
        self.discarded = False
        RecordingArchive.instances.append(self)

    def add(self, name, data):
        self.entries.append((name, data))

    def finalize(self):
        self.finalized = True
        return b"archive:" + b",".join(name.encode() for name, _ in self.entries)

    def discard(self):
        self.discarded = True
        self.entries.clear()


@pytest.fixture(autouse=True)
def reset_archives():
    RecordingArchive.instances.clear()


@pytest.fixture
def collection(make_source):
    c = ImageCollection()
    c.replace([
        make_source("a.jpg", size=(60, 40)),
        make_source("b.png", size=(40, 60), color="blue"),
        make_source("c.heic", size=(50, 50), color="green"),
    ])
    return c


def test_export_all_builds_zip_in_collection_order(collection):
    data = export_all(collection, FrameParameters(aspect_ratio_key="16:9"))

    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        assert zf.namelist() == ["a_wide.png", "b_wide.png", "c_wide.png"]
        with Image.open(io.BytesIO(zf.read("b_wide.png"))) as framed:
            # Portrait 40x60 source: long side 60 becomes the width
            assert framed.size == (60, 34)


def test_duplicate_base_names_are_not_renamed(make_source):
    c = ImageCollection()
    c.replace([make_source("sunset.jpg"), make_source("sunset.heic")])

    export_all(c, FrameParameters(aspect_ratio_key="1:1"), archive_factory=RecordingArchive)

    archive = RecordingArchive.instances[0]
    assert [name for name, _ in archive.entries] == ["sunset_square.png", "sunset_square.png"]


def test_progress_reports_each_image_and_cursor_is_restored(collection):
    collection.navigate(1)
    seen = []

    def progress(index, total, source):
        collection.current_index = index  # a live preview following along
        seen.append((index, total, source.name))

    export_all(collection, FrameParameters(), archive_factory=RecordingArchive, progress=progress)

    assert seen == [(0, 3, "a.jpg"), (1, 3, "b.png"), (2, 3, "c.heic")]
    assert collection.current_index == 1


def test_encode_failure_discards_archive_and_restores_cursor(collection):
    collection.navigate(2)
    calls = []

    def flaky_encode(image):
        calls.append(image.size)
        if len(calls) == 2:
            raise EncodeError("disk full")
        return encode_png(image)

    def progress(index, total, source):
        collection.current_index = index

    with pytest.raises(EncodeError):
        export_all(
            collection, FrameParameters(),
            encode=flaky_encode, archive_factory=RecordingArchive, progress=progress,
        )

    archive = RecordingArchive.instances[0]
    assert archive.discarded
    assert not archive.finalized
    assert archive.entries == []
    assert len(calls) == 2
    assert collection.current_index == 2


def test_cancel_discards_archive(collection):
    polls = []

    def should_cancel():
        polls.append(True)
        return len(polls) > 1

    with pytest.raises(ExportCancelled):
        export_all(collection, FrameParameters(), archive_factory=RecordingArchive, should_cancel=should_cancel)

    archive = RecordingArchive.instances[0]
    assert archive.discarded and not archive.finalized
    assert collection.current_index == 0


def test_export_current(collection):
    collection.navigate(1)
    name, data = export_current(collection, FrameParameters(aspect_ratio_key="4:5"))
    assert name == "b_portrait.png"
    with Image.open(io.BytesIO(data)) as framed:
        assert framed.size == (48, 60)


def test_export_current_needs_an_image():
    with pytest.raises(IndexError):
        export_current(ImageCollection(), FrameParameters())


def test_zip_archive_discard_drops_entries():
    archive = ZipArchive()
    archive.add("a.png", b"123")
    archive.discard()
    assert archive.names == []


def test_write_output_does_not_clobber(tmp_path):
    first = write_output(tmp_path / "out" / "frame_export.zip", b"one")
    second = write_output(tmp_path / "out" / "frame_export.zip", b"two")
    assert first.read_bytes() == b"one"
    assert second.name == "frame_export-01.zip"

    replaced = write_output(first, b"three", overwrite=True)
    assert replaced == first
    assert first.read_bytes() == b"three"
