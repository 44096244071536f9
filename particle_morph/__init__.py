"""ParticleMorph: hand gestures morph a particle field into shapes."""

__version__ = "0.1.0"
