"""Domain services: game state machine and question generation."""
