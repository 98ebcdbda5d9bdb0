"""Host Group Admin — service layer."""
