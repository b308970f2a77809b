"""Domain layer: records, tables, WAL entries, selectors and the errors they raise."""
