"""HTML card rendering."""
