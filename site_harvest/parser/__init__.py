"""site_harvest.parser: HTML, sitemap and robots.txt parsing."""
