"""Core query logic — compiler, classifier, assembler, access filtering and orchestration."""
