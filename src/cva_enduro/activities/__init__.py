"""Named units of work invoked by workflows."""
