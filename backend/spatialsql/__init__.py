"""spatialsql — coordinate reprojection and extent aggregation for SQL hosts."""
