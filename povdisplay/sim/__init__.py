"""Headless simulator: timing model, software renderer, simulator-only settings and the simulator itself."""