"""Table Stakes: natural-language questions to SQL, tables and charts."""
