# conftest.py: root-level pytest configuration
import sys
import os

# Put the project root on sys.path so tests can ``import forecasting``,
# ``import pipeline`` etc. without an editable install.
sys.path.insert(0, os.path.dirname(__file__))

# The root __init__.py is the installed package entry point, not a test module.
collect_ignore_glob = ["__init__.py"]
collect_ignore = [os.path.join(os.path.dirname(__file__), "__init__.py")]
