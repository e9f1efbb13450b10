"""Aggregation core: key parsing, record buffering and snapshot conversion."""
