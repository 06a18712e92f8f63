"""Balance Calculator module — remaining allowance per employee and year."""
