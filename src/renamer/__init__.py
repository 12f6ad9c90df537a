"""renamer: rename, move, or delete files by editing a listing in your editor."""

__version__ = "0.1.0"
