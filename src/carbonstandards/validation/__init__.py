"""Input file validation module."""

from carbonstandards.validation.core import ValidationResult, ValidationRunner
from carbonstandards.validation.reporter import ConsoleReporter

__all__ = ["ConsoleReporter", "ValidationResult", "ValidationRunner"]
