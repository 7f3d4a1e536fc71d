from .step_10_rosetta import CheckRosettaStep
from .step_20_homebrew import EnsureHomebrewStep
from .step_30_dependencies import InstallDependenciesStep
from .step_40_directories import CreateDirectoriesStep
from .step_50_emulators import InstallEmulatorsStep
from .step_60_firmware import FirmwareStep
from .step_70_shell_env import ShellEnvironmentStep
from .step_80_fixes import AutomaticFixesStep

__all__ = [
    "CheckRosettaStep",
    "EnsureHomebrewStep",
    "InstallDependenciesStep",
    "CreateDirectoriesStep",
    "InstallEmulatorsStep",
    "FirmwareStep",
    "ShellEnvironmentStep",
    "AutomaticFixesStep",
]
