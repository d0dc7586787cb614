"""Output layer — turn a ServiceResult into text for humans or machines."""
