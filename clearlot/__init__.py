"""ClearLot marketplace backend package."""
