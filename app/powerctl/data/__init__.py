"""Bundled data files for powerctl."""
