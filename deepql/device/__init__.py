from .device_manager import DeviceManager, DeviceInfo

__all__ = ["DeviceManager", "DeviceInfo"]
