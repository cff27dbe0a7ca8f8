"""3D Vision Driver Setup - Main package

Installs the legacy NVIDIA 3D Vision stereo driver patched to match the
running DCH display driver, configures it, and switches it on.
"""

__version__ = "1.0.0"
__package_name__ = "nvidia-3dv-setup"
