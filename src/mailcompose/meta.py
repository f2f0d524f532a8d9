"""Package metadata for mailcompose."""

__app_name__ = "mailcompose"
__version__ = "0.1.0"
__author__ = "mailcompose contributors"
__license__ = "MIT"
