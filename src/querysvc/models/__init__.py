"""Domain and response models."""
