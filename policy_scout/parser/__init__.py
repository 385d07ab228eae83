"""policy_scout.parser: content extraction, validation, robots.txt and sitemap parsing."""
