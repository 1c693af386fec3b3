"""site_harvest.crawler: BFS frontier, renderers, fetcher and page resources."""
