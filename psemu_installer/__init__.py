"""PlayStation emulator provisioning for macOS (PCSX, PCSX2, RPCS3).

Core design goals:
- Idempotent steps that re-check the real system
- One ensure() for every install-if-absent target
- Failures recorded, never fatal (except an unsupported host)
- BIOS/firmware detected and documented, never downloaded
- Centralized logging
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
