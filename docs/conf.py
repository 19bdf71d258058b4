import os
import sys

sys.path.insert(0, os.path.abspath(".."))

project = "CMS Agent"
author = "CMS Agent contributors"
release = "1.0.0"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "myst_parser",
]

exclude_patterns = ["_build"]

html_theme = "sphinx_rtd_theme"

autodoc_typehints = "description"
autodoc_member_order = "bysource"
