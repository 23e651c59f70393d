import io

import pytest
from PIL import Image

from photo_frame.models import SourceImage


@pytest.fixture(autouse=True)
def isolated_config_dir(tmp_path, monkeypatch):
    """Keep config_dir() inside the test's tmp_path on every platform."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("APPDATA", str(tmp_path / "appdata"))
    return tmp_path


@pytest.fixture
def png_bytes():
    def _make(size=(40, 30), color="red", mode="RGB") -> bytes:
        out = io.BytesIO()
        Image.new(mode, size, color).save(out, "PNG")
        return out.getvalue()
    return _make


@pytest.fixture
def make_source():
    def _make(name="photo.jpg", size=(40, 30), color="red", mode="RGB") -> SourceImage:
        return SourceImage(name=name, image=Image.new(mode, size, color))
    return _make
