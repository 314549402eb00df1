"""POV display engine: framebuffers, canvas, transforms, patterns, effects, motor control, settings and comms."""

__version__ = "0.1.0"