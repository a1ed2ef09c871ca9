"""Call-for-proposals administration backend."""
