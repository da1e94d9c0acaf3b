"""Speaker-notes embedding and slide extraction for PowerPoint packages."""
