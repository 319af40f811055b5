"""HTTP routers for Monte-Log."""
