"""Classification engine and scan lifecycle."""
