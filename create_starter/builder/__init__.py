"""create-starter builder module.

Everything that turns an extracted starter into a runnable project:
package-manager and git execution, backend generation, and the root
``package.json``.

Key classes:
    ProcessRunner       - Package-manager / git subprocess execution
    PackageManager      - yarn or npm command-line forms
    CreateAppGenerator  - Default backend generator (create-strapi-app)
    ProjectManifest     - Root package.json with concurrent dev scripts
"""

from .generator import AppGenerator, CreateAppGenerator, RunConfiguration
from .manifest import MANIFEST_FILE, ProjectManifest, build_manifest, write_manifest
from .process import PackageManager, ProcessRunner, StepOutcome, detect_package_manager

__all__ = [
    # Process execution
    "ProcessRunner",
    "PackageManager",
    "StepOutcome",
    "detect_package_manager",
    # Backend generation
    "AppGenerator",
    "CreateAppGenerator",
    "RunConfiguration",
    # Manifest
    "ProjectManifest",
    "MANIFEST_FILE",
    "build_manifest",
    "write_manifest",
]
