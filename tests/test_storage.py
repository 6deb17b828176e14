import pytest

from imagestudio.image.storage import make_persister, save_binary_file


def test_save_binary_file_creates_directory(tmp_path):
    output_dir = tmp_path / "public" / "generated"

    url = save_binary_file(str(output_dir), "text_to_image_1_0.png", b"bytes")

    assert url == "/generated/text_to_image_1_0.png"
    assert (output_dir / "text_to_image_1_0.png").read_bytes() == b"bytes"


def test_save_binary_file_is_idempotent_on_directory(tmp_path):
    save_binary_file(str(tmp_path), "a_1_0.png", b"a")
    save_binary_file(str(tmp_path), "a_1_1.png", b"b")

    assert sorted(p.name for p in tmp_path.iterdir()) == ["a_1_0.png", "a_1_1.png"]


def test_save_binary_file_keeps_writes_inside_output_dir(tmp_path):
    output_dir = tmp_path / "out"

    url = save_binary_file(str(output_dir), "../escape.png", b"x")

    assert url == "/generated/escape.png"
    assert (output_dir / "escape.png").exists()
    assert not (tmp_path / "escape.png").exists()


def test_save_binary_file_propagates_write_errors(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("x")

    with pytest.raises(OSError):
        save_binary_file(str(blocker / "sub"), "a.png", b"x")


def test_make_persister_binds_directory(tmp_path):
    persist = make_persister(str(tmp_path))

    assert persist("b_2_0.png", b"y") == "/generated/b_2_0.png"
    assert (tmp_path / "b_2_0.png").read_bytes() == b"y"
