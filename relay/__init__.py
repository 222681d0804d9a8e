"""Payment Failure Relay - Stripe payment failures to Gmail alerts and Airtable rows."""
