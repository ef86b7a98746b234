import pathlib

import pytest
from PIL import Image
from streamlit.testing.v1 import AppTest

from tests.test_utils import RED


APP_PATH = pathlib.Path(__file__).resolve().parents[2] / "app.py"


@pytest.fixture
def asset_root(tmp_path, monkeypatch) -> pathlib.Path:
    base_dir = tmp_path / "assets" / "wojak-layers" / "BASE"
    base_dir.mkdir(parents=True)
    Image.new("RGBA", (8, 8), RED).save(base_dir / "BASE_Wojak_classic.png")
    monkeypatch.setenv("WOJAK_ASSET_ROOT", str(tmp_path))
    return tmp_path


def test_export_renders_only_on_request(asset_root) -> None:
    at = AppTest.from_file(str(APP_PATH), default_timeout=60).run()
    assert not at.exception
    assert "export" not in at.session_state

    # reruns without a click still skip the export render
    at.run()
    assert "export" not in at.session_state

    at.button(key="prepare_export_btn").click().run()
    assert not at.exception
    assert "export" in at.session_state
    _, data = at.session_state["export"]
    assert data.startswith(b"\x89PNG")
