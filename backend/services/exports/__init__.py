"""Script exports: plain text, Excel and Word."""
