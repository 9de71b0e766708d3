"""Backend API for the portfolio site."""
