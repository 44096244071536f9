"""OpenCV display of the particle field."""
