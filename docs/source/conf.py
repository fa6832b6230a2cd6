import os
import sys

sys.path.insert(0, os.path.abspath("../.."))

project = "Classroom Booking"
copyright = "2026, Classroom Booking contributors"
author = "Classroom Booking contributors"
release = "0.1.0"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "sphinx.ext.viewcode",
]

autodoc_mock_imports = ["pika"]

templates_path = ["_templates"]
exclude_patterns: list[str] = []

html_theme = "sphinx_rtd_theme"
html_static_path = ["_static"]
