from __future__ import annotations

import os

import pytest

from opi5_kernel_builder import main as main_mod
from opi5_kernel_builder.errors import ConfigError
from opi5_kernel_builder.main import main, parse_config


@pytest.fixture(autouse=True)
def six_cores(monkeypatch):
    monkeypatch.setattr(os, "cpu_count", lambda: 6)


def test_defaults():
    cfg = parse_config([])
    assert cfg.kernel_version == "6.8.0"
    assert cfg.build_dir == "/tmp/kernel_build"
    assert cfg.cross_compile == "aarch64-linux-gnu-"
    assert cfg.arch == "arm64"
    assert cfg.defconfig == "rockchip_linux_defconfig"
    assert cfg.jobs == 6
    assert cfg.install_gpu_blobs and cfg.enable_opencl and cfg.enable_vulkan
    assert not (cfg.clean_build or cfg.verbose or cfg.no_install or cfg.cleanup or cfg.verify_gpu)


def test_value_flags_short_and_long():
    cfg = parse_config(
        ["-v", "6.10.0", "-j", "8", "-d", "/srv/k", "--defconfig", "foo_defconfig",
         "--cross-compile", "aarch64-none-elf-", "-c", "--verbose", "--no-install", "--cleanup"]
    )
    assert cfg.kernel_version == "6.10.0"
    assert cfg.jobs == 8
    assert cfg.build_dir == "/srv/k"
    assert cfg.defconfig == "foo_defconfig"
    assert cfg.cross_compile == "aarch64-none-elf-"
    assert cfg.clean_build and cfg.verbose and cfg.no_install and cfg.cleanup


@pytest.mark.parametrize(
    "argv, jobs",
    [
        ([], 6),
        (["-j", "1"], 1),
        (["--jobs", "32"], 32),
        (["-j", "0"], 6),
        (["-j", "lots"], 6),
        (["-j"], 6),
    ],
)
def test_job_count(argv, jobs):
    assert parse_config(argv).jobs == jobs


def test_disable_gpu_forces_apis_off():
    cfg = parse_config(["--disable-gpu"])
    assert (cfg.install_gpu_blobs, cfg.enable_opencl, cfg.enable_vulkan) == (False, False, False)


def test_disable_then_enable_gpu_keeps_apis_off():
    cfg = parse_config(["--disable-gpu", "--enable-gpu"])
    assert cfg.install_gpu_blobs is True
    assert cfg.enable_opencl is False
    assert cfg.enable_vulkan is False


def test_flags_apply_in_command_line_order():
    cfg = parse_config(["--disable-gpu", "--enable-opencl"])
    assert cfg.install_gpu_blobs is False
    assert cfg.enable_opencl is True
    assert cfg.enable_vulkan is False

    cfg = parse_config(["--enable-opencl", "--disable-gpu"])
    assert cfg.enable_opencl is False


def test_api_toggles_independent():
    cfg = parse_config(["--disable-vulkan", "--enable-opencl"])
    assert cfg.install_gpu_blobs and cfg.enable_opencl
    assert not cfg.enable_vulkan


def test_trailing_value_flag_is_ignored():
    assert parse_config(["--clean", "-v"]).kernel_version == "6.8.0"
    assert parse_config(["--defconfig"]).defconfig == "rockchip_linux_defconfig"


def test_value_flag_takes_next_token_even_if_flag_like():
    cfg = parse_config(["-v", "--clean"])
    assert cfg.kernel_version == "--clean"
    assert cfg.clean_build is False

    cfg = parse_config(["--build-dir", "--disable-gpu", "--defconfig", "-h"])
    assert cfg.build_dir == "--disable-gpu"
    assert cfg.defconfig == "-h"
    assert cfg.install_gpu_blobs is True


def test_jobs_takes_negative_token_as_value():
    cfg = parse_config(["-j", "-3", "--verbose"])
    assert cfg.jobs == 6
    assert cfg.verbose is True


def test_unrecognized_flag_names_the_token():
    with pytest.raises(ConfigError, match="--frobnicate"):
        parse_config(["--frobnicate"])


def test_no_prefix_abbreviation():
    with pytest.raises(ConfigError):
        parse_config(["--clea"])


def test_empty_version_rejected():
    with pytest.raises(ConfigError):
        parse_config(["-v", ""])


def test_config_file_then_flags(tmp_path):
    conf = tmp_path / "build.yaml"
    conf.write_text("kernel_version: 6.9.1\ninstall_gpu_blobs: false\njobs: 3\n", encoding="utf-8")

    cfg = parse_config(["--config", str(conf)])
    assert cfg.kernel_version == "6.9.1"
    assert cfg.jobs == 3
    assert (cfg.install_gpu_blobs, cfg.enable_opencl, cfg.enable_vulkan) == (False, False, False)

    cfg = parse_config(["--config", str(conf), "-v", "6.12.0", "--enable-gpu"])
    assert cfg.kernel_version == "6.12.0"
    assert cfg.install_gpu_blobs is True
    assert cfg.enable_vulkan is False


def test_config_file_unquoted_version_rejected(tmp_path):
    conf = tmp_path / "build.yaml"
    conf.write_text("kernel_version: 6.10\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="quote it"):
        parse_config(["--config", str(conf)])

    conf.write_text('kernel_version: "6.10"\n', encoding="utf-8")
    assert parse_config(["--config", str(conf)]).kernel_version == "6.10"


def test_config_file_unknown_key(tmp_path):
    conf = tmp_path / "build.yaml"
    conf.write_text("kernal_version: 6.9\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="kernal_version"):
        parse_config(["--config", str(conf)])


@pytest.mark.parametrize("flag", ["-h", "--help"])
def test_help_exits_zero_without_running(flag, monkeypatch, capsys):
    def _boom(*a, **kw):
        raise AssertionError("pipeline must not run for --help")

    monkeypatch.setattr(main_mod, "run", _boom)
    monkeypatch.setattr(os, "geteuid", lambda: 1000)

    with pytest.raises(SystemExit) as exc:
        main([flag])

    assert exc.value.code == 0
    out = capsys.readouterr().out
    assert "usage: orangepi-kernel-builder" in out
    assert "--disable-gpu" in out


def test_bad_flag_exits_one(monkeypatch, capsys):
    monkeypatch.setattr(main_mod, "run", lambda *a, **kw: pytest.fail("must not run"))
    assert main(["--nope"]) == 1
