import os

import pytest

from nativegen import utils
from nativegen.emitter import EmitterOptions
from tests.utils import config


def test_merge_config():
    user_config = {
        "generator": {
            "checks_flag": "Checks.ENABLED",
        },
        "extra": 1,
    }
    default_config = {
        "generator": {
            "checks_flag": "LWJGLUtil.CHECKS",
            "debug_flag": "LWJGLUtil.DEBUG",
        },
        "output": {
            "java_dir": "java",
        },
    }
    assert utils.merge_config(user_config, default_config) == {
        "generator": {
            "checks_flag": "Checks.ENABLED",
            "debug_flag": "LWJGLUtil.DEBUG",
        },
        "output": {
            "java_dir": "java",
        },
        "extra": 1,
    }


def test_merge_config_type_mismatch():
    with pytest.raises(TypeError, match="Type mismatch for key 'generator'"):
        utils.merge_config({"generator": "x"}, {"generator": {"checks_flag": "A"}})


def test_default_config(config):
    assert config["generator"]["checks_flag"] == "LWJGLUtil.CHECKS"
    assert config["output"]["java_dir"] == "java"
    assert config["logging"]["dir"] == ""

    options = EmitterOptions.from_config(config)
    assert options.buffer_object_check == "GLChecks.ensureBufferObject"
    assert "java.nio.*" in options.java_imports
    assert options.native_includes == ("common_tools.h",)


def test_try_load_config_order(tmp_path, monkeypatch):
    monkeypatch.delenv("NATIVEGEN_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    assert utils.try_load_config() == utils.load_default_config()

    (tmp_path / "nativegen.toml").write_text('[output]\njava_dir = "src"\n')
    assert utils.try_load_config()["output"]["java_dir"] == "src"

    env_config = tmp_path / "env.toml"
    env_config.write_text('[output]\njava_dir = "env"\n')
    monkeypatch.setenv("NATIVEGEN_CONFIG", str(env_config))
    assert utils.try_load_config()["output"]["java_dir"] == "env"

    explicit = tmp_path / "explicit.toml"
    explicit.write_text('[generator]\nchecks_flag = "CHECKS"\n')
    loaded = utils.try_load_config(str(explicit))
    assert loaded["generator"]["checks_flag"] == "CHECKS"
    assert loaded["output"]["java_dir"] == "java"


def test_try_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        utils.try_load_config(str(tmp_path / "missing.toml"))


def test_save_code_creates_directories(tmp_path):
    path = os.path.join(tmp_path, "a", "b", "Test.java")
    utils.save_code(path, "class Test {}\n")
    assert utils.read_file(path) == "class Test {}\n"

    with pytest.raises(FileNotFoundError):
        utils.read_file(os.path.join(tmp_path, "missing.java"))


def test_merge_config_reports_nested_key():
    with pytest.raises(TypeError, match="Type mismatch for key 'generator.java_imports': expected list, got dict"):
        utils.merge_config({"generator": {"java_imports": {}}}, {"generator": {"java_imports": []}})


def test_save_code_skips_unchanged_files(tmp_path):
    path = os.path.join(tmp_path, "Test.c")
    assert utils.save_code(path, "EXTERN_C_ENTER\n")
    assert not utils.save_code(path, "EXTERN_C_ENTER\n")
    assert utils.save_code(path, "EXTERN_C_EXIT\n")
    assert utils.read_file(path) == "EXTERN_C_EXIT\n"
