"""Check-in verification engine for the workforce suite."""
