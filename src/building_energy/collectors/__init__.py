"""Reading importers."""
