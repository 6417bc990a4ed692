"""UX metric calculation, aggregation and reporting."""
