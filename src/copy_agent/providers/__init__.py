"""External collaborators: scraping, keyword research and object storage."""
