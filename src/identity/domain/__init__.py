"""Identity domain: users, roles, authentication state."""
