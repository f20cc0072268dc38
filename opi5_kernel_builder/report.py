from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .build_config import BuildConfig


def _on_off(flag: bool) -> str:
    return "Enabled" if flag else "Disabled"


def print_header(console: Console) -> None:
    console.print(
        Panel(
            f"Orange Pi 5 Plus Linux Kernel Builder v{__version__}\n"
            "Optimized for RK3588 SoC and Mali G610 GPU\n"
            "Supporting Ubuntu 25.04 with Hardware Acceleration",
            style="bold cyan",
        )
    )


def print_summary(console: Console, cfg: BuildConfig) -> None:
    table = Table(title="Build Configuration", show_header=False, title_style="bold yellow")
    table.add_column("setting")
    table.add_column("value")
    table.add_row("Kernel Version", cfg.kernel_version)
    table.add_row("Build Directory", cfg.build_dir)
    table.add_row("Parallel Jobs", str(cfg.jobs))
    table.add_row("Mali GPU Support", _on_off(cfg.install_gpu_blobs))
    table.add_row("OpenCL Support", _on_off(cfg.enable_opencl))
    table.add_row("Vulkan Support", _on_off(cfg.enable_vulkan))
    table.add_row("Clean Build", "Yes" if cfg.clean_build else "No")
    if cfg.dry_run:
        table.add_row("Dry Run", "Yes")
    console.print(table)


def print_next_steps(console: Console, cfg: BuildConfig) -> None:
    console.print()
    console.print("[bold green]Next steps:[/]")
    if cfg.no_install:
        console.print(f"1. Install the kernel from {cfg.kernel_dir} (built with --no-install)")
    else:
        console.print("1. Reboot your Orange Pi 5 Plus")
        console.print("2. Select the new kernel from the boot menu")
        console.print("3. Verify with: uname -r")

    if not cfg.install_gpu_blobs:
        return

    console.print()
    console.print("[bold cyan]Mali GPU Features Available:[/]")
    console.print("• Hardware-accelerated graphics rendering")
    console.print("• OpenCL 2.2 compute support (test with: clinfo)")
    console.print("• Vulkan 1.2 graphics API (test with: vulkaninfo)")
    console.print("• Hardware video decode/encode acceleration")
    console.print("• EGL and OpenGL ES support")

    console.print()
    console.print("[bold yellow]GPU Testing Commands:[/]")
    console.print("• Check OpenCL: clinfo | grep -i mali", highlight=False)
    console.print("• Check Vulkan: vulkaninfo | grep -i mali", highlight=False)
    console.print("• Check EGL: eglinfo | grep -i mali", highlight=False)
    console.print("• GPU memory: cat /sys/kernel/debug/dri/*/gpu_memory", highlight=False)
    console.print("• GPU load: cat /sys/class/devfreq/fb000000.gpu/load", highlight=False)


def print_troubleshooting(console: Console, cfg: BuildConfig) -> None:
    console.print()
    console.print("[bold red]Troubleshooting:[/]")
    console.print(f"• Check the build log: {cfg.log_path}", highlight=False)
    console.print("• Ensure you have sufficient disk space (>10GB)")
    console.print("• Verify your internet connection for downloads")
    console.print("• Try running with --clean flag")
    console.print("• For GPU issues, try --disable-gpu flag")
