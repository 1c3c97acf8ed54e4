"""
Image Update Checker

Decides whether a newer tag exists for a container image reference and
which tag and digest to move to.
"""

__version__ = "0.1.0"

from .cli import main
from .models import CheckResult, CooldownOptions, Dependency, Requirement, RequirementSource
from .update_checker import UpdateChecker

__all__ = [
    "main",
    "CheckResult",
    "CooldownOptions",
    "Dependency",
    "Requirement",
    "RequirementSource",
    "UpdateChecker",
]
