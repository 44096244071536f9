"""Camera and hand-tracking collaborators."""
