"""
Backend selection and management.

Provides a unified interface for CPU (NumPy/SciPy) and NVIDIA GPU (PyTorch)
factorization kernels.
"""

import logging
from typing import Optional

from .base import BackendBase, CholeskyFactor
from .cpu_fp64_backend import CPUBackendFP64
from .precision_detector import detect_gpu_capabilities, GPUCapabilities
from .._config import get_default_backend, _normalize

logger = logging.getLogger(__name__)

# Try importing PyTorch backend (NVIDIA GPU)
try:
    import torch  # noqa: F401
    from .gpu_fp64_backend import PyTorchBackendFP64
    PYTORCH_AVAILABLE = True
except ImportError:
    PYTORCH_AVAILABLE = False


def get_backend(backend: Optional[str] = None) -> BackendBase:
    """
    Get computational backend.

    Parameters
    ----------
    backend : str or None
        Backend selection:
        - None: Use the configured default (see pylm._config)
        - 'auto': GPU if a full-FP64 CUDA device is present, else CPU
        - 'cpu': CPU with NumPy/SciPy (FP64)
        - 'gpu' / 'pytorch': PyTorch CUDA (FP64)

    Returns
    -------
    BackendBase
        Backend instance

    Examples
    --------
    >>> backend = get_backend('cpu')
    >>> backend.name
    'cpu_fp64'
    """
    choice = get_default_backend() if backend is None else _normalize(backend)

    if choice == 'auto':
        caps = detect_gpu_capabilities()
        if caps.has_gpu and caps.recommended and PYTORCH_AVAILABLE:
            logger.debug("auto backend: using %s", caps.gpu_name)
            return PyTorchBackendFP64()
        logger.debug("auto backend: using CPU (%s)", caps.fp64_support.value)
        return CPUBackendFP64()

    if choice == 'cpu':
        return CPUBackendFP64()

    # 'gpu' or 'pytorch'
    if not PYTORCH_AVAILABLE:
        raise RuntimeError(
            "PyTorch backend unavailable.\n"
            "Install: pip install torch"
        )
    caps = detect_gpu_capabilities()
    if not caps.has_gpu:
        raise RuntimeError(
            "No CUDA GPU detected.\n"
            "Options:\n"
            "  - Use backend='cpu'\n"
            "  - Install PyTorch with CUDA for NVIDIA"
        )
    return PyTorchBackendFP64()


def list_available_backends() -> list:
    """List names of available backends."""
    backends = ['cpu']
    if PYTORCH_AVAILABLE:
        backends.append('pytorch')
    return backends


def print_backend_info():
    """Print detailed backend information (diagnostic)."""
    caps = detect_gpu_capabilities()

    print("pylm Backend Status")
    print("=" * 50)
    print("\nAvailable Backends:")
    print("  CPU (FP64):          ✓ - LAPACK Cholesky (dpotrf/dpstrf)")
    print(f"  PyTorch CUDA (FP64): {'✓' if PYTORCH_AVAILABLE else '✗'} - Cholesky on device")

    print("\nHardware Detection:")
    if caps.has_gpu:
        print(f"  GPU Name: {caps.gpu_name}")
        print(f"  FP64 Support: {caps.fp64_support.value}")
    else:
        print("  No GPU detected")

    print("\nRecommended Backend:")
    try:
        backend = get_backend('auto')
        print(f"  {backend.name}")
    except RuntimeError as e:
        print(f"  Error: {e}")


__all__ = [
    'get_backend',
    'list_available_backends',
    'print_backend_info',
    'BackendBase',
    'CholeskyFactor',
    'CPUBackendFP64',
    'GPUCapabilities',
    'detect_gpu_capabilities',
    'PYTORCH_AVAILABLE',
]


if __name__ == "__main__":
    print_backend_info()
