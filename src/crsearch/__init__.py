"""crsearch — navigable index of reference-documentation pages."""
