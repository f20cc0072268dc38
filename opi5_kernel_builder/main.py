from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import fields
from typing import Any, Dict, List, Optional, Sequence

from rich.console import Console

from .build_config import (
    DEFAULT_BUILD_DIR,
    DEFAULT_CROSS_COMPILE,
    DEFAULT_DEFCONFIG,
    DEFAULT_KERNEL_VERSION,
    BuildConfig,
    load_config_file,
    parse_jobs,
)
from .errors import ConfigError
from .lib.command import CommandRunner
from .lib.env import PATHS, Paths
from .logging_utils import build_log, make_console
from .pipeline import BuildCtx, PipelineResult, run_pipeline
from .report import print_header, print_next_steps, print_summary, print_troubleshooting
from .steps import (
    CleanupStep,
    CompileKernelStep,
    ConfigureKernelStep,
    EnableOpenCLStep,
    EnableVulkanStep,
    FetchGpuBlobsStep,
    FetchKernelSourceStep,
    InstallDependenciesStep,
    InstallGpuDriversStep,
    InstallKernelStep,
    PreflightStep,
    PrepareEnvironmentStep,
    VerifyGpuStep,
)

logger = logging.getLogger(__name__)

PROG = "orangepi-kernel-builder"

EXAMPLES = f"""\
examples:
  {PROG}                                   # build with all defaults (GPU enabled)
  {PROG} -j 8 --clean                      # clean build with 8 jobs
  {PROG} -v 6.10.0 --no-install            # build v6.10.0 without installing
  {PROG} --disable-gpu                     # build without Mali GPU support
  {PROG} --disable-vulkan --enable-opencl  # build with OpenCL only
"""


def build_steps():
    return [
        PreflightStep(),
        PrepareEnvironmentStep(),
        InstallDependenciesStep(),
        FetchGpuBlobsStep(),
        InstallGpuDriversStep(),
        EnableOpenCLStep(),
        EnableVulkanStep(),
        FetchKernelSourceStep(),
        ConfigureKernelStep(),
        CompileKernelStep(),
        InstallKernelStep(),
        VerifyGpuStep(),
        CleanupStep(),
    ]


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str):
        raise ConfigError(message)

    def bind_values(self, args: Sequence[str]) -> List[str]:
        """Join every value option with the token after it, even one that looks like a flag.

        ``-v --clean`` becomes ``-v=--clean``. Only a value option in last
        position is left bare.
        """

        out: List[str] = []
        it = iter(args)
        for tok in it:
            if isinstance(self._option_string_actions.get(tok), _StoreValue):
                value = next(it, None)
                if value is not None:
                    tok = f"{tok}={value}"
            out.append(tok)
        return out


class _StoreValue(argparse.Action):
    """Value option; a bare one (last on the command line) is ignored."""

    def __init__(self, option_strings, dest, **kwargs):
        kwargs.setdefault("nargs", "?")
        super().__init__(option_strings, dest, **kwargs)

    def convert(self, value: str) -> Any:
        return value

    def __call__(self, parser, namespace, values, option_string=None):
        if values is None:
            return
        setattr(namespace, self.dest, self.convert(values))


class _StoreJobs(_StoreValue):
    def convert(self, value: str) -> Any:
        return parse_jobs(value)


class _DisableGpu(argparse.Action):
    """--disable-gpu also switches off everything that depends on the blobs."""

    def __init__(self, option_strings, dest, **kwargs):
        super().__init__(option_strings, dest, nargs=0, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        namespace.install_gpu_blobs = False
        namespace.enable_opencl = False
        namespace.enable_vulkan = False


def _config_file_parser() -> argparse.ArgumentParser:
    p = _ArgumentParser(add_help=False, allow_abbrev=False)
    p.add_argument("--config", action=_StoreValue, default=None)
    return p


def build_parser() -> argparse.ArgumentParser:
    p = _ArgumentParser(
        prog=PROG,
        description="Build and install a Linux kernel for the Orange Pi 5 Plus with Mali G610 GPU support.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    p.add_argument("-v", "--version", dest="kernel_version", action=_StoreValue, metavar="VERSION",
                   help=f"Kernel version to build (default: {DEFAULT_KERNEL_VERSION})")
    p.add_argument("-j", "--jobs", dest="jobs", action=_StoreJobs, metavar="N",
                   help="Number of parallel jobs (default: CPU cores)")
    p.add_argument("-d", "--build-dir", dest="build_dir", action=_StoreValue, metavar="PATH",
                   help=f"Build directory (default: {DEFAULT_BUILD_DIR})")
    p.add_argument("-c", "--clean", dest="clean_build", action="store_true",
                   help="Clean build (remove previous artifacts)")
    p.add_argument("--defconfig", dest="defconfig", action=_StoreValue, metavar="CONFIG",
                   help=f"Defconfig to use (default: {DEFAULT_DEFCONFIG})")
    p.add_argument("--cross-compile", dest="cross_compile", action=_StoreValue, metavar="PREFIX",
                   help=f"Cross-compiler prefix (default: {DEFAULT_CROSS_COMPILE})")
    p.add_argument("--verbose", dest="verbose", action="store_true", help="Show command output on the console")
    p.add_argument("--no-install", dest="no_install", action="store_true", help="Build only, don't install")
    p.add_argument("--cleanup", dest="cleanup", action="store_true",
                   help="Cleanup build directory after completion")

    p.add_argument("--enable-gpu", dest="install_gpu_blobs", action="store_const", const=True,
                   help="Install Mali G610 GPU blobs and drivers (default: on)")
    p.add_argument("--disable-gpu", dest="install_gpu_blobs", action=_DisableGpu,
                   help="Skip Mali GPU blob installation (also disables OpenCL and Vulkan)")
    p.add_argument("--enable-opencl", dest="enable_opencl", action="store_const", const=True,
                   help="Enable OpenCL support for Mali GPU (default: on)")
    p.add_argument("--disable-opencl", dest="enable_opencl", action="store_const", const=False,
                   help="Disable OpenCL support")
    p.add_argument("--enable-vulkan", dest="enable_vulkan", action="store_const", const=True,
                   help="Enable Vulkan support for Mali GPU (default: on)")
    p.add_argument("--disable-vulkan", dest="enable_vulkan", action="store_const", const=False,
                   help="Disable Vulkan support")
    p.add_argument("--verify-gpu", dest="verify_gpu", action="store_true",
                   help="Verify GPU installation after completion")

    p.add_argument("--dry-run", dest="dry_run", action="store_true",
                   help="Log every command and file change without executing it")
    p.add_argument("--log", dest="log_path", action=_StoreValue, metavar="PATH",
                   help=f"Build log file (default: {PATHS.log_default})")
    p.add_argument("--config", dest="config", action=_StoreValue, metavar="FILE",
                   help="YAML file with defaults; command-line flags override it")
    return p


def parse_config(argv: Optional[Sequence[str]] = None) -> BuildConfig:
    """Resolve defaults, the optional YAML file and flags into one BuildConfig.

    Flags are applied strictly in command-line order, so later flags win
    (``--disable-gpu --enable-opencl`` leaves OpenCL on).
    """

    parser = build_parser()
    args = parser.bind_values(sys.argv[1:] if argv is None else argv)

    defaults: Dict[str, Any] = {f.name: f.default for f in fields(BuildConfig)}
    pre, _ = _config_file_parser().parse_known_args(args)
    if pre.config:
        defaults.update(load_config_file(pre.config))

    parser.set_defaults(**defaults)
    ns = parser.parse_args(args)

    return BuildConfig(**{name: getattr(ns, name) for name in BuildConfig.field_names()})


def run(
    cfg: BuildConfig,
    *,
    paths: Optional[Paths] = None,
    runner: Optional[CommandRunner] = None,
    console: Optional[Console] = None,
) -> PipelineResult:
    """Run the whole build with one scoped log sink."""

    with build_log(cfg.log_path, verbose=cfg.verbose, console=console) as log:
        ctx = BuildCtx(cfg=cfg, paths=paths or PATHS, runner=runner or CommandRunner(), log=log)
        log.info("Starting Orange Pi 5 Plus kernel build process with Mali GPU support")

        result = run_pipeline(ctx=ctx, steps=build_steps())

        if result.ok:
            log.success("Kernel build process completed successfully!")
        else:
            log.error("Kernel build process failed! (step %s)", result.failed_step)
        return result


def main(argv: Optional[list[str]] = None) -> int:
    console = make_console()

    try:
        cfg = parse_config(argv)
    except ConfigError as e:
        console.print(f"[bold red]error:[/] {e}", highlight=False)
        console.print(f"Try '{PROG} --help' for more information.", highlight=False)
        return 1

    print_header(console)
    print_summary(console, cfg)

    result = run(cfg, console=console)

    if result.ok:
        print_next_steps(console, cfg)
        return 0

    print_troubleshooting(console, cfg)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
