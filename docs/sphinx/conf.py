# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""Sphinx configuration for archwith documentation."""

project = "archwith"
author = "archwith Contributors"
release = "0.1.0"

extensions: list[str] = ["sphinx.ext.autodoc"]

html_theme = "alabaster"
