"""VAT Counsel backend package."""
