"""Tournament domain: formats, courses, handicaps, records, results and sync."""
