from __future__ import annotations

from opi5_kernel_builder.lib.env import Paths
from opi5_kernel_builder.lib.mali import MaliLayout
from opi5_kernel_builder.lib.manifests import (
    host_packages,
    kernel_config_fragment,
    load_sources_manifest,
)


def test_host_packages_single_ordered_batch():
    pkgs = host_packages()
    assert pkgs[0] == "build-essential"
    assert len(pkgs) == len(set(pkgs))
    for required in ("gcc-aarch64-linux-gnu", "device-tree-compiler", "clinfo", "vulkan-tools", "mesa-opencl-icd"):
        assert required in pkgs


def test_kernel_fragment_lines_are_config_assignments():
    frag = kernel_config_fragment()
    assert all(line.startswith("CONFIG_") and "=" in line for line in frag)
    assert "CONFIG_ARCH_ROCKCHIP=y" in frag
    assert "CONFIG_MALI_CSF_SUPPORT=y" in frag
    assert "CONFIG_DRM_PANFROST=y" in frag


def test_mali_layout_locations():
    mali = MaliLayout.for_paths(Paths())
    assert str(mali.firmware_path) == "/lib/firmware/mali_csffw.bin"
    assert str(mali.driver_path) == "/usr/lib/libmali-valhall-g610-g6p0-x11-wayland-gbm.so"
    assert str(mali.opencl_icd_path) == "/etc/OpenCL/vendors/mali.icd"
    assert str(mali.vulkan_icd_path) == "/usr/share/vulkan/icd.d/mali.json"
    assert str(mali.vulkan_link_path) == "/usr/lib/libvulkan_mali.so"
    assert mali.vulkan_api_version == "1.2.131"
    assert mali.firmware.url.startswith("https://")


def test_link_table_targets_single_driver():
    mali = MaliLayout.for_paths(Paths())
    names = [link.name for link, _ in mali.link_table()]
    assert names == [
        "libMali.so",
        "libMali.so.1",
        "libmali.so",
        "libmali.so.1",
        "libEGL.so.1",
        "libGLESv1_CM.so.1",
        "libGLESv2.so.2",
        "libgbm.so.1",
    ]
    assert {target for _, target in mali.link_table()} == {mali.driver_path}


def test_paths_under_reroots_everything(tmp_path):
    p = Paths().under(tmp_path)
    assert p.boot_dir == str(tmp_path / "boot")
    assert p.vulkan_icd_dir == str(tmp_path / "usr/share/vulkan/icd.d")


def test_sources_manifest():
    kernel = load_sources_manifest()["kernel"]
    assert kernel["primary"]["branch"] == "ubuntu-rockchip-6.8-opi5"
    assert "torvalds" in kernel["mainline"]["url"]
    assert kernel["patches"]["dest"] == "ubuntu-rockchip"
