"""
Device Manager - Automatic GPU detection with graceful fallback.

Detection Priority:
1. NVIDIA CUDA
2. Apple Silicon (MPS)
3. CPU (fallback)
"""
import logging
import torch
from typing import Optional, Literal
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DeviceType = Literal["cuda", "mps", "cpu"]


@dataclass
class DeviceInfo:
    """Information about the detected compute device."""
    device: torch.device
    device_type: DeviceType
    name: str
    memory_gb: Optional[float] = None


def _mps_available() -> bool:
    return hasattr(torch.backends, "mps") and torch.backends.mps.is_available()


class DeviceManager:
    """
    Manages device selection for PyTorch operations.

    Picks CUDA when present, then MPS, then CPU. A preferred device is
    honoured when it is available.
    """

    def __init__(
        self,
        preferred: Optional[str] = None,
        force_cpu: bool = False
    ):
        """
        Initialize the device manager.

        Args:
            preferred: Force a specific device type ("cuda", "mps", "cpu");
                "auto" or None detects
            force_cpu: If True, always use CPU regardless of GPU availability
        """
        self.preferred = None if preferred == "auto" else preferred
        self.force_cpu = force_cpu
        self._device_info: Optional[DeviceInfo] = None

    @classmethod
    def from_config(cls, config) -> "DeviceManager":
        """Create from a DeviceConfig."""
        return cls(preferred=config.preferred, force_cpu=config.force_cpu)

    def detect_device(self) -> DeviceInfo:
        """
        Detect and return the best available compute device.

        Returns:
            DeviceInfo containing the device and metadata
        """
        if self._device_info is not None:
            return self._device_info

        if self.force_cpu or self.preferred == "cpu":
            return self._create_cpu_device()

        if self.preferred == "cuda" and torch.cuda.is_available():
            return self._create_cuda_device()
        elif self.preferred == "mps" and _mps_available():
            return self._create_mps_device()
        elif self.preferred is not None:
            logger.warning("Preferred device %r not available, auto-detecting", self.preferred)

        if torch.cuda.is_available():
            return self._create_cuda_device()

        if _mps_available():
            return self._create_mps_device()

        return self._create_cpu_device()

    def _create_cuda_device(self) -> DeviceInfo:
        """Create CUDA device info."""
        gpu_name = torch.cuda.get_device_name(0)
        memory_gb = torch.cuda.get_device_properties(0).total_memory / (1024**3)
        self._device_info = DeviceInfo(
            device=torch.device("cuda"),
            device_type="cuda",
            name=gpu_name,
            memory_gb=round(memory_gb, 1)
        )
        return self._device_info

    def _create_mps_device(self) -> DeviceInfo:
        self._device_info = DeviceInfo(
            device=torch.device("mps"),
            device_type="mps",
            name="Apple Silicon (MPS)"
        )
        return self._device_info

    def _create_cpu_device(self) -> DeviceInfo:
        self._device_info = DeviceInfo(
            device=torch.device("cpu"),
            device_type="cpu",
            name="CPU"
        )
        return self._device_info

    def get_device(self) -> torch.device:
        """Get the PyTorch device object."""
        return self.detect_device().device

    def get_device_type(self) -> DeviceType:
        """Get the device type string."""
        return self.detect_device().device_type

    def get_summary(self) -> str:
        """Get a one-line summary of the device."""
        info = self.detect_device()
        if info.memory_gb:
            return f"{info.name} ({info.memory_gb} GB)"
        return info.name
