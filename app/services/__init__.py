"""Services package for Assembly Inventory."""
