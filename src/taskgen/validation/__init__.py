# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Lint checks for TaskGen projects (reserved names, isolated components, internal types)."""

from taskgen.validation.checks import (
    ValidationError,
    ValidationResult,
    ValidationWarning,
    check_user_constructors,
    validate,
)

__all__ = [
    "ValidationError",
    "ValidationResult",
    "ValidationWarning",
    "check_user_constructors",
    "validate",
]
