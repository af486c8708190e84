"""
GPU FP64 capability detection.

All pylm computation is double precision, so a GPU is only worth using
when its FP64 throughput is close to full speed.
"""

import warnings
from dataclasses import dataclass
from typing import Optional
from enum import Enum


class PrecisionSupport(Enum):
    """FP64 support level for hardware."""
    NO_GPU = "no_gpu"            # No CUDA GPU available
    GIMPED_FP64 = "gimped_fp64"  # FP64 exists but slow (consumer NVIDIA)
    FULL_FP64 = "full_fp64"      # Full-speed FP64 (A100, H100)


@dataclass
class GPUCapabilities:
    """
    GPU capability information.

    Attributes
    ----------
    has_gpu : bool
        Whether a CUDA GPU is available
    gpu_name : str
        Human-readable GPU name
    fp64_support : PrecisionSupport
        Level of FP64 support
    fp64_throughput_ratio : float
        Ratio of FP64 to FP32 throughput
    """
    has_gpu: bool
    gpu_name: str
    fp64_support: PrecisionSupport
    fp64_throughput_ratio: float

    @property
    def recommended(self) -> bool:
        """Whether the GPU should be preferred over the CPU for FP64 work."""
        return self.fp64_support == PrecisionSupport.FULL_FP64


def detect_gpu_capabilities() -> GPUCapabilities:
    """
    Detect a CUDA GPU and its FP64 capabilities.

    Returns
    -------
    GPUCapabilities
        Detected hardware capabilities
    """
    gpu_name = _cuda_device_name()
    if gpu_name is None:
        return GPUCapabilities(
            has_gpu=False,
            gpu_name="CPU only",
            fp64_support=PrecisionSupport.NO_GPU,
            fp64_throughput_ratio=1.0,
        )

    support, ratio = _classify_nvidia_gpu(gpu_name)
    return GPUCapabilities(
        has_gpu=True,
        gpu_name=gpu_name,
        fp64_support=support,
        fp64_throughput_ratio=ratio,
    )


def _cuda_device_name() -> Optional[str]:
    try:
        import torch
    except ImportError:
        return None
    if not torch.cuda.is_available():
        return None
    return torch.cuda.get_device_name(0)


def _classify_nvidia_gpu(gpu_name: str) -> tuple[PrecisionSupport, float]:
    """
    Classify NVIDIA GPU FP64 capabilities.

    Parameters
    ----------
    gpu_name : str
        GPU name from torch.cuda.get_device_name()

    Returns
    -------
    (support_level, throughput_ratio)
    """
    gpu_upper = gpu_name.upper()

    # Data center GPUs with full FP64
    for model in ('A100', 'A800', 'H100', 'H800', 'V100', 'P100'):
        if model in gpu_upper:
            return PrecisionSupport.FULL_FP64, 0.5

    # Ampere and later consumer cards
    for series in ('RTX 50', 'RTX 40', 'RTX 30'):
        if series in gpu_upper:
            return PrecisionSupport.GIMPED_FP64, 1/64

    if 'RTX 20' in gpu_upper or 'GTX' in gpu_upper:
        return PrecisionSupport.GIMPED_FP64, 1/32

    warnings.warn(
        f"Unknown NVIDIA GPU '{gpu_name}'. Assuming gimped FP64."
    )
    return PrecisionSupport.GIMPED_FP64, 1/32
