"""Terminal and JSON presentation of findings and summaries."""
