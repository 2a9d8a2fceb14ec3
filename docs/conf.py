from __future__ import annotations

project = "dynpkg"
author = "dynpkg maintainers"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "sphinx.ext.viewcode",
    "myst_parser",
]

html_theme = "furo"

autodoc_typehints = "description"
autodoc_mock_imports = ["requests"]
templates_path = ["_templates"]
exclude_patterns = ["_build"]
