# Copyright 2026 archwith Contributors
# SPDX-License-Identifier: Apache-2.0

"""archwith: archive adapters that let mirror types stand in for remote types."""

__version__ = "0.1.0"
