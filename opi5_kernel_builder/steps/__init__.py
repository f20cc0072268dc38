from .step_05_preflight import PreflightStep
from .step_10_prepare_environment import PrepareEnvironmentStep
from .step_20_install_dependencies import InstallDependenciesStep
from .step_30_fetch_gpu_blobs import FetchGpuBlobsStep
from .step_35_install_gpu_drivers import InstallGpuDriversStep
from .step_40_enable_opencl import EnableOpenCLStep
from .step_45_enable_vulkan import EnableVulkanStep
from .step_50_fetch_kernel_source import FetchKernelSourceStep
from .step_60_configure_kernel import ConfigureKernelStep
from .step_70_compile_kernel import CompileKernelStep
from .step_80_install_kernel import InstallKernelStep
from .step_85_verify_gpu import VerifyGpuStep
from .step_90_cleanup import CleanupStep

__all__ = [
    "PreflightStep",
    "PrepareEnvironmentStep",
    "InstallDependenciesStep",
    "FetchGpuBlobsStep",
    "InstallGpuDriversStep",
    "EnableOpenCLStep",
    "EnableVulkanStep",
    "FetchKernelSourceStep",
    "ConfigureKernelStep",
    "CompileKernelStep",
    "InstallKernelStep",
    "VerifyGpuStep",
    "CleanupStep",
]
