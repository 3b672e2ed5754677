"""Named value transformations applied before formatting."""
