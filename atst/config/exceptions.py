# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Custom exceptions for the configuration system.

We keep these separate so that the CLI and the evaluation pipeline can catch
config-specific failures without importing the entire config machinery.
"""


class ConfigError(Exception):
    """Base for all configuration errors."""


class ConfigLoadError(ConfigError):
    """
    Raised when a config file cannot be read from disk or parsed as YAML, or
    when a file referenced from the config (`stdin: <input`) cannot be read.
    """


class ConfigValidationError(ConfigError):
    """
    Raised when a config file parses fine but fails schema validation.
    This covers missing required fields, type mismatches, out-of-range values,
    unknown analysers and any other structural problem.
    """
