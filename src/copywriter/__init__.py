"""Update copyright years in .NET project files."""

__version__ = "1.0.0"
