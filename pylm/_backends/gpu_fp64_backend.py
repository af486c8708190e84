"""
GPU backend using PyTorch with FP64 precision.

For data center GPUs: A100, H100, V100.
"""

import logging
import warnings
from typing import Optional

import numpy as np

from .base import GPUBackendFP64, CholeskyFactor
from ..exceptions import RankDeficiencyError

logger = logging.getLogger(__name__)


class PyTorchBackendFP64(GPUBackendFP64):
    """
    PyTorch GPU backend with FP64 precision.

    Cross products and factorizations run on the device; results are
    returned as NumPy arrays.
    """

    def __init__(self, device: Optional[str] = None):
        """Initialize PyTorch FP64 backend."""
        self.name = "pytorch_fp64"
        self.precision = "fp64"

        try:
            import torch
            self.torch = torch
        except ImportError:
            raise ImportError(
                "PyTorch required for GPU backend. "
                "Install: pip install torch"
            )

        if device == 'mps':
            raise RuntimeError(
                "FP64 not supported on Apple Metal. Use the CPU backend."
            )

        if device is None:
            if torch.cuda.is_available():
                device = 'cuda'
            else:
                warnings.warn("No CUDA GPU available, using CPU")
                device = 'cpu'

        self.device = torch.device(device)

        # Warn if using FP64 on gimped hardware
        if self.device.type == 'cuda':
            from .precision_detector import detect_gpu_capabilities, PrecisionSupport
            caps = detect_gpu_capabilities()
            if caps.fp64_support == PrecisionSupport.GIMPED_FP64:
                warnings.warn(
                    f"Using FP64 on {caps.gpu_name} with gimped FP64 support. "
                    f"This will be ~{int(1/caps.fp64_throughput_ratio)}x slower than FP32.",
                    UserWarning
                )

    def _to_device(self, a):
        return self.torch.as_tensor(np.asarray(a, dtype=np.float64), device=self.device)

    def gram(self, X: np.ndarray, weights: Optional[np.ndarray] = None) -> np.ndarray:
        X_gpu = self._to_device(X)
        if weights is None or len(weights) == 0:
            XtX = X_gpu.T @ X_gpu
        else:
            w_gpu = self._to_device(weights)
            XtX = X_gpu.T @ (X_gpu * w_gpu.unsqueeze(1))
        return XtX.cpu().numpy()

    def cholesky(
        self,
        A: np.ndarray,
        pivoted: bool = False,
        tol: Optional[float] = None
    ) -> CholeskyFactor:
        torch = self.torch
        A = np.asarray(A, dtype=np.float64)
        p = A.shape[0]
        if tol is None:
            tol = self.default_tol(A)

        A_gpu = self._to_device(A)
        U, piv, rank = self._pivoted_cholesky_gpu(A_gpu, tol)
        logger.debug("pivoted Cholesky of %dx%d matrix on %s: rank %d", p, p, self.device, rank)

        if not pivoted:
            if rank < p:
                raise RankDeficiencyError(
                    f"Design matrix is rank deficient: rank {rank} < {p} columns. "
                    f"Use allow_rank_deficient=True for a pivoted fit.",
                    rank=rank, expected_rank=p
                )
            U, info = torch.linalg.cholesky_ex(A_gpu, upper=True)
            if int(info.item()) != 0:
                raise RankDeficiencyError(
                    f"Cross-product matrix is not positive definite "
                    f"(leading minor {int(info.item())})",
                    rank=rank, expected_rank=p
                )
            return CholeskyFactor(
                U=U.cpu().numpy(), piv=np.arange(p, dtype=np.int64),
                rank=p, pivoted=False, tol=tol
            )

        return CholeskyFactor(
            U=U.cpu().numpy(),
            piv=piv.cpu().numpy().astype(np.int64),
            rank=rank,
            pivoted=True,
            tol=tol
        )

    def _pivoted_cholesky_gpu(self, A, tol):
        """Outer-product Cholesky with diagonal pivoting (same rule as dpstrf)."""
        torch = self.torch
        p = A.shape[0]
        S = A.clone()
        U = torch.zeros_like(S)
        piv = torch.arange(p, dtype=torch.int64, device=self.device)
        rank = p

        for k in range(p):
            d = torch.diagonal(S)[k:]
            j = k + int(torch.argmax(d).item())
            if S[j, j].item() <= tol:
                rank = k
                break
            if j != k:
                S[[k, j], :] = S[[j, k], :]
                S[:, [k, j]] = S[:, [j, k]]
                U[:, [k, j]] = U[:, [j, k]]
                piv[[k, j]] = piv[[j, k]]
            ukk = torch.sqrt(S[k, k])
            U[k, k] = ukk
            U[k, k+1:] = S[k, k+1:] / ukk
            S[k+1:, k+1:] -= torch.outer(U[k, k+1:], U[k, k+1:])

        U[rank:, rank:] = 0.0
        return U, piv, rank

    def cho_solve(self, factor: CholeskyFactor, b: np.ndarray) -> np.ndarray:
        torch = self.torch
        b = np.asarray(b, dtype=np.float64)
        r = factor.rank
        x = np.zeros_like(b)
        if r == 0:
            return x
        U11 = self._to_device(factor.U[:r, :r])
        rhs = self._to_device(b[factor.active])
        vector = rhs.ndim == 1
        if vector:
            rhs = rhs.unsqueeze(1)
        z = torch.linalg.solve_triangular(U11.T, rhs, upper=False)
        sol = torch.linalg.solve_triangular(U11, z, upper=True)
        if vector:
            sol = sol.squeeze(1)
        x[factor.active] = sol.cpu().numpy()
        return x

    def get_device_info(self) -> dict:
        """Get backend information."""
        return {
            'backend': 'gpu',
            'precision': 'fp64',
            'device': str(self.device),
            'library': f'PyTorch {self.torch.__version__}',
        }
