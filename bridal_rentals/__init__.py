"""Back-office service for a wedding-dress rental shop."""
