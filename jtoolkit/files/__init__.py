"""File-Management: duplicates, organizing, backups, renaming, image resizing."""
