# Copyright 2026 TaskGen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Sphinx configuration for TaskGen documentation."""

project = "TaskGen"
author = "TaskGen Contributors"
release = "0.1.0"

extensions: list[str] = ["sphinx.ext.autodoc", "sphinx.ext.napoleon"]

html_theme = "alabaster"
