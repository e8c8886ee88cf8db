"""sqlaudit - embedded SQL inventory for Perl codebases."""

__version__ = "0.3.0"
