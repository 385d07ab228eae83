"""policy_scout.crawler: HTTP fetching, link extraction and the breadth-first crawl."""
