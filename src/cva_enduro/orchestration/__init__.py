"""Local workflow engine and activity history."""
