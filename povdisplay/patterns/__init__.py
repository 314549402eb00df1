"""Patterns (solid, rainbow, scanner, image, matrix) and their registry."""