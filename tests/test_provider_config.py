import os

import pytest

from imagestudio.llm.provider_config import (
    DEFAULT_MODEL_ID,
    ProviderConfig,
    load_key,
    parse_modalities,
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in (
        "GEMINI_API_KEY",
        "GEMINI_IMAGE_MODEL",
        "GEMINI_RESPONSE_MODALITIES",
        "GEMINI_PROBE_MODEL",
        "IMAGE_OUTPUT_MODE",
        "IMAGE_OUTPUT_DIR",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_defaults_without_environment(clean_env):
    config = ProviderConfig.from_env()

    assert config.credential == ""
    assert not config.has_credential
    assert config.model_id == DEFAULT_MODEL_ID
    assert config.response_modalities == ("IMAGE", "TEXT")
    assert config.output_mode == "inline"
    assert not config.writes_to_disk


def test_environment_overrides(clean_env, tmp_path):
    clean_env.setenv("GEMINI_API_KEY", " secret ")
    clean_env.setenv("GEMINI_IMAGE_MODEL", "gemini-2.5-flash-image")
    clean_env.setenv("GEMINI_RESPONSE_MODALITIES", "image")
    clean_env.setenv("IMAGE_OUTPUT_MODE", "DISK")
    clean_env.setenv("IMAGE_OUTPUT_DIR", str(tmp_path / "out"))

    config = ProviderConfig.from_env()

    assert config.credential == "secret"
    assert config.model_id == "gemini-2.5-flash-image"
    assert config.response_modalities == ("IMAGE",)
    assert config.writes_to_disk
    assert config.output_dir == str(tmp_path / "out")


def test_key_file_fallback(clean_env, tmp_path):
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "gemini.key").write_text("from-file\n")

    assert load_key("config/gemini.key") == "from-file"
    assert ProviderConfig.from_env().credential == "from-file"


def test_missing_key_file(clean_env):
    assert load_key("config/gemini.key") is None
    assert load_key(None) is None


def test_unknown_output_mode_is_rejected():
    with pytest.raises(ValueError):
        ProviderConfig(output_mode="s3")


def test_parse_modalities():
    assert parse_modalities(None) == ("IMAGE", "TEXT")
    assert parse_modalities(" text , image ") == ("TEXT", "IMAGE")
    assert parse_modalities(" , ") == ("IMAGE", "TEXT")


def test_default_output_dir_is_relative_to_working_directory(clean_env):
    config = ProviderConfig.from_env()

    assert config.output_dir == os.path.join("public", "generated")
    assert not os.path.isabs(config.output_dir)
