"""Lambda glue: event parsing and process-wide clients."""
