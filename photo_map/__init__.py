"""Photo map: EXIF-driven thumbnails and proximity clusters for a photo folder."""
