"""Reports app package: aggregated dashboard metrics for administrators."""
