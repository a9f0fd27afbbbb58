"""Infrastructure layer - adapters for the database, brokerage, messaging and locks."""
